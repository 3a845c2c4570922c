"""Tests for the structural validator."""

import pytest

from harvester.errors import StructuralViolation, ViolationReason
from harvester.validation.structure_checker import (
    StructureChecker,
    declared_java_version,
    java_version_aliases,
    validate_structure,
)


def violation(repo) -> ViolationReason:
    with pytest.raises(StructuralViolation) as excinfo:
        StructureChecker().check(repo)
    return excinfo.value.reason


class TestJavaVersion:
    def test_aliases_for_legacy_notation(self):
        assert java_version_aliases("1.8") == {"1.8", "8"}
        assert java_version_aliases("8") == {"8", "1.8"}

    def test_modern_versions_have_one_spelling(self):
        assert java_version_aliases("17") == {"17"}

    def test_reads_compiler_source(self):
        pom = "<properties>\n<maven.compiler.source>1.8</maven.compiler.source>\n</properties>"
        assert declared_java_version(pom) == "1.8"

    def test_reads_java_version_property(self):
        assert declared_java_version("<java.version>11</java.version>") == "11"

    def test_first_matching_line_wins(self):
        pom = "<java.version>1.8</java.version>\n<maven.compiler.release>17</maven.compiler.release>"
        assert declared_java_version(pom) == "1.8"

    def test_property_reference_declares_nothing(self):
        pom = "<maven.compiler.source>${java.version}</maven.compiler.source>"
        assert declared_java_version(pom) is None

    def test_no_declaration(self):
        assert declared_java_version("<project><modelVersion>4.0.0</modelVersion></project>") is None


class TestStructureChecker:
    def test_valid_repository_passes(self, tmp_path, make_repo):
        repo = make_repo(tmp_path)
        assert StructureChecker().check(repo) is True

    def test_short_version_notation_passes(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, java_version="8")
        assert validate_structure(repo) is True

    def test_undeclared_version_passes(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, java_version=None)
        assert validate_structure(repo) is True

    def test_missing_pom(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, pom=False)
        assert violation(repo) == ViolationReason.MISSING_DESCRIPTOR

    def test_wrong_java_version(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, java_version="11")
        assert violation(repo) == ViolationReason.WRONG_JAVA_VERSION

    def test_missing_jupiter_dependency(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, jupiter=False)
        assert violation(repo) == ViolationReason.MISSING_TEST_FRAMEWORK

    def test_missing_test_directory(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, test_dir=False)
        assert violation(repo) == ViolationReason.MISSING_TEST_DIRECTORY

    def test_test_directory_without_java_files(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, test_files=0)
        (repo / "src" / "test" / "java" / "notes.txt").write_text("todo")
        assert violation(repo) == ViolationReason.NO_TEST_FILES

    def test_rules_checked_in_order(self, tmp_path, make_repo):
        """A wrong version is reported even when later rules would also fail."""
        repo = make_repo(tmp_path, java_version="17", jupiter=False, test_dir=False)
        assert violation(repo) == ViolationReason.WRONG_JAVA_VERSION

    def test_custom_target_version(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, java_version="11")
        assert StructureChecker(java_version="11").check(repo) is True

    def test_inspection_is_pure(self, tmp_path, make_repo):
        repo = make_repo(tmp_path, jupiter=False)
        before = sorted((p.relative_to(repo), p.read_bytes()) for p in repo.rglob("*") if p.is_file())

        first = violation(repo)
        second = violation(repo)

        after = sorted((p.relative_to(repo), p.read_bytes()) for p in repo.rglob("*") if p.is_file())
        assert first == second
        assert before == after
