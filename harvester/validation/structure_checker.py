"""
Static checks on a cloned Maven project. Reads files, never modifies them.

Rules, in order (the first unmet rule rejects the repository):
    1. pom.xml exists at the root
    2. the Java version the pom declares, if any, is the target version
    3. the pom mentions the test framework dependency (junit-jupiter)
    4. src/test/java exists
    5. src/test/java holds at least one .java file
"""

import logging
import re
from pathlib import Path
from typing import Optional, Set

from harvester.errors import StructuralViolation, ViolationReason

logger = logging.getLogger(__name__)

DESCRIPTOR = "pom.xml"
TEST_SOURCE_DIR = Path("src") / "test" / "java"
TEST_FILE_GLOB = "*.java"

VERSION_PROPERTY_PAT = re.compile(r"java\.version|maven\.compiler\.(source|target|release)")
VERSION_NUMBER_PAT = re.compile(r"[0-9]+\.[0-9]+|[0-9]+")


def java_version_aliases(version: str) -> Set[str]:
    """
    Equivalent spellings of a Java version: "1.8" and "8" name the same release.
    Only releases up to 8 have the legacy "1.x" form.
    """
    version = version.strip()
    if version.startswith("1.") and version[2:].isdigit():
        return {version, version[2:]}
    if version.isdigit() and int(version) <= 8:
        return {version, f"1.{version}"}
    return {version}


def declared_java_version(pom_text: str) -> Optional[str]:
    """
    The first version number on the first line that sets java.version or a
    maven.compiler source/target/release property. None if there is none,
    including when that line only references another property.
    """
    for line in pom_text.splitlines():
        if VERSION_PROPERTY_PAT.search(line):
            match = VERSION_NUMBER_PAT.search(line)
            return match.group(0) if match else None
    return None


class StructureChecker:
    def __init__(self, java_version: str = "1.8", test_framework_marker: str = "junit-jupiter"):
        self.accepted_versions = java_version_aliases(java_version)
        self.java_version = java_version
        self.test_framework_marker = test_framework_marker

    def check(self, repo_path: Path) -> bool:
        """
        Raise StructuralViolation naming the first unmet rule, else return True.
        """
        repo_path = Path(repo_path)
        repo_name = repo_path.name
        logger.info(f"Validating repository structure: {repo_name}")

        pom = repo_path / DESCRIPTOR
        if not pom.is_file():
            self._reject(ViolationReason.MISSING_DESCRIPTOR, f"No {DESCRIPTOR} found in {repo_name}")

        pom_text = pom.read_text(encoding="utf-8", errors="replace")

        version = declared_java_version(pom_text)
        if version is not None and version not in self.accepted_versions:
            self._reject(
                ViolationReason.WRONG_JAVA_VERSION,
                f"Repository {repo_name} uses Java {version}, not Java {self.java_version}",
            )

        if self.test_framework_marker not in pom_text:
            self._reject(
                ViolationReason.MISSING_TEST_FRAMEWORK,
                f"No {self.test_framework_marker} dependency found in {repo_name}",
            )

        test_dir = repo_path / TEST_SOURCE_DIR
        if not test_dir.is_dir():
            self._reject(ViolationReason.MISSING_TEST_DIRECTORY, f"No test directory found in {repo_name}")

        if not any(p.is_file() for p in test_dir.rglob(TEST_FILE_GLOB)):
            self._reject(ViolationReason.NO_TEST_FILES, f"No test files found in {repo_name}")

        logger.info(f"Repository structure validation passed for {repo_name}")
        return True

    def _reject(self, reason: ViolationReason, message: str):
        logger.warning(message)
        raise StructuralViolation(reason, message)


def validate_structure(repo_path: Path, java_version: str = "1.8", test_framework_marker: str = "junit-jupiter") -> bool:
    return StructureChecker(java_version, test_framework_marker).check(repo_path)
