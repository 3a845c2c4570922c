import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of an external command."""
    command: List[str]
    exit_code: int
    output: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out

    def tail(self, lines: int = 20) -> str:
        return "\n".join(self.output.strip().splitlines()[-lines:])


def run_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
) -> CommandResult:
    """
    Execute a command, capturing stdout and stderr together.

    A timeout or a missing executable is reported through the result,
    never raised: callers decide how a failed command maps onto their stage.

    Args:
        cmd: Command and arguments as a list
        cwd: Working directory
        timeout: Timeout in seconds, None to wait indefinitely
        env: Additional environment variables

    Returns:
        CommandResult with the exit code and combined output
    """
    logger.debug(f"Running: {' '.join(cmd)}" + (f" (in {cwd})" if cwd else ""))

    merged_env = os.environ.copy()
    if env:
        merged_env.update(env)

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            timeout=timeout,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=merged_env,
        )
        return CommandResult(cmd, result.returncode, result.stdout or "")

    except subprocess.TimeoutExpired as e:
        output = e.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        return CommandResult(cmd, -1, output, timed_out=True)

    except FileNotFoundError:
        return CommandResult(cmd, 127, f"Command not found: {cmd[0]}")
