import logging
import shutil
from pathlib import Path
from typing import Iterable

from harvester.errors import PrerequisiteMissing
from harvester.utils.commands import run_command

logger = logging.getLogger(__name__)


def check_prerequisites(tools: Iterable[str], clone_dir: Path) -> None:
    """
    Make sure every required tool is on PATH and the clone directory exists.
    Raises PrerequisiteMissing for the first tool that cannot be found.
    """
    logger.info("Checking prerequisites...")

    for tool in tools:
        if shutil.which(tool) is None:
            logger.error(f"{tool} is not installed or not in PATH")
            raise PrerequisiteMissing(tool)

    # java prints its version banner on stderr, which run_command folds into output
    if shutil.which("java"):
        banner = run_command(["java", "-version"]).output.strip().splitlines()
        logger.info(f"Java version detected: {banner[0] if banner else 'unknown'}")
    if shutil.which("mvn"):
        banner = run_command(["mvn", "-version"]).output.strip().splitlines()
        logger.info(f"Maven version detected: {banner[0] if banner else 'unknown'}")

    Path(clone_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Prerequisites check passed")
