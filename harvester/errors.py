from enum import Enum
from typing import Optional


class HarvestError(Exception):
    """Base class for every error raised by the harvester."""


class PrerequisiteMissing(HarvestError):
    """A required external tool is not installed. Aborts the run."""

    def __init__(self, tool: str):
        super().__init__(f"{tool} is not installed or not in PATH")
        self.tool = tool


class SearchError(HarvestError):
    """The search endpoint refused the request outright (bad token, invalid query)."""


class SearchTransportError(HarvestError):
    """A single search page could not be fetched. The page is skipped."""


class RateLimited(HarvestError):
    """The search endpoint reported its rate limit. Pagination stops early."""


# --- Per-candidate failures ---

class StageError(HarvestError):
    """
    A candidate failed one pipeline stage.
    Never aborts the run: the coordinator rejects the candidate and moves on.
    """
    stage = "unknown"


class AcquisitionError(StageError):
    stage = "acquire"


class ViolationReason(str, Enum):
    MISSING_DESCRIPTOR = "missing_descriptor"
    WRONG_JAVA_VERSION = "wrong_java_version"
    MISSING_TEST_FRAMEWORK = "missing_test_framework"
    MISSING_TEST_DIRECTORY = "missing_test_directory"
    NO_TEST_FILES = "no_test_files"


class StructuralViolation(StageError):
    stage = "structure"

    def __init__(self, reason: ViolationReason, message: str):
        super().__init__(message)
        self.reason = reason


class BuildError(StageError):
    stage = "build"


class TestFailureOrTimeout(StageError):
    stage = "test"
    __test__ = False  # keep pytest from collecting this class

    def __init__(self, message: str, timed_out: bool = False, exit_code: Optional[int] = None):
        super().__init__(message)
        self.timed_out = timed_out
        self.exit_code = exit_code
