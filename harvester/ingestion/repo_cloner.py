"""
Shallow-clone a candidate repository into the clone directory.

An existing directory counts as already cloned: nothing is fetched and its
contents are not checked.
"""

import logging
from pathlib import Path

from harvester.errors import AcquisitionError
from harvester.models.candidate import repo_dirname
from harvester.utils.commands import run_command

logger = logging.getLogger(__name__)

# Never let git block on a credentials prompt for a missing or private repository
GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


def local_path_for(clone_location: str, destination_root: Path) -> Path:
    return Path(destination_root) / repo_dirname(clone_location)


def acquire(clone_location: str, destination_root: Path) -> Path:
    """
    Clone `clone_location` (depth 1) under `destination_root` and return the local path.
    Raises AcquisitionError if git fails.
    """
    name = repo_dirname(clone_location)
    if name in ("", ".", ".."):
        raise AcquisitionError(f"Cannot derive a directory name from {clone_location!r}")
    target = Path(destination_root) / name

    logger.info(f"Cloning: {clone_location}")

    if target.exists():
        logger.warning(f"Repository {name} already exists, skipping clone")
        return target

    Path(destination_root).mkdir(parents=True, exist_ok=True)
    cmd = ["git", "clone", "--depth", "1", clone_location, str(target)]
    result = run_command(cmd, env=GIT_ENV)
    if not result.ok:
        msg = result.tail(5) or f"clone failed ({result.exit_code})"
        logger.error(f"Failed to clone: {name}")
        logger.debug(msg)
        raise AcquisitionError(f"git clone failed for {clone_location}: {msg}")

    logger.info(f"Successfully cloned: {name}")
    return target
