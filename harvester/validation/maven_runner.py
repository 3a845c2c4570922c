"""
Compile and test stages, both driven by the project's build tool (Maven).
Only the exit status decides the outcome; the output tail is kept in the log file.
"""

import logging
from pathlib import Path
from typing import Optional

from harvester.errors import BuildError, TestFailureOrTimeout
from harvester.utils.commands import run_command

logger = logging.getLogger(__name__)

DEFAULT_TEST_TIMEOUT = 300

COMPILE_ARGS = ["clean", "compile", "-q", "-Dmaven.test.skip=true"]
TEST_ARGS = ["test", "-q"]


def build(repo_path: Path, timeout: Optional[float] = None, build_tool: str = "mvn") -> bool:
    """
    Clean-compile the main sources only. Test sources are neither compiled nor run.
    Raises BuildError on a non-zero exit, a missing tool or an expired timeout.
    """
    repo_path = Path(repo_path)
    logger.info(f"Compiling repository: {repo_path.name}")

    result = run_command([build_tool, *COMPILE_ARGS], cwd=repo_path, timeout=timeout)
    if not result.ok:
        if result.timed_out:
            msg = f"Compilation timed out after {timeout}s for {repo_path.name}"
        else:
            msg = f"Compilation failed for {repo_path.name} (exit code {result.exit_code})"
        logger.error(msg)
        logger.debug(result.tail())
        raise BuildError(msg)

    logger.info(f"Compilation successful for {repo_path.name}")
    return True


def run_tests(repo_path: Path, timeout: float = DEFAULT_TEST_TIMEOUT, build_tool: str = "mvn") -> bool:
    """
    Run the full test suite once, bounded by `timeout` seconds.
    A timeout is a failure like any other: raises TestFailureOrTimeout.
    """
    repo_path = Path(repo_path)
    logger.info(f"Running tests for repository: {repo_path.name}")

    result = run_command([build_tool, *TEST_ARGS], cwd=repo_path, timeout=timeout)
    if not result.ok:
        if result.timed_out:
            msg = f"Tests timed out after {timeout}s for {repo_path.name}"
        else:
            msg = f"Tests failed for {repo_path.name} (exit code {result.exit_code})"
        logger.error(msg)
        logger.debug(result.tail())
        raise TestFailureOrTimeout(msg, timed_out=result.timed_out, exit_code=result.exit_code)

    logger.info(f"Tests passed for {repo_path.name}")
    return True
