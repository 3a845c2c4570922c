from pathlib import Path
from typing import Optional

import pytest

from harvester.config import HarvestConfig

POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project>
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.example</groupId>
  <artifactId>{name}</artifactId>
  <properties>
{properties}
  </properties>
  <dependencies>
{dependencies}
  </dependencies>
</project>
"""

JUPITER_DEPENDENCY = """    <dependency>
      <groupId>org.junit.jupiter</groupId>
      <artifactId>junit-jupiter</artifactId>
      <version>5.9.2</version>
      <scope>test</scope>
    </dependency>"""

JUNIT4_DEPENDENCY = """    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
      <scope>test</scope>
    </dependency>"""


@pytest.fixture
def config(tmp_path: Path) -> HarvestConfig:
    return HarvestConfig(
        clone_dir=tmp_path / "cloned_repos",
        log_file=tmp_path / "repo_validation.log",
        validated_list=tmp_path / "validated_repos.txt",
        pending_list=tmp_path / "repo_urls.tmp",
        page_delay=0,
    )


@pytest.fixture
def make_repo():
    """Factory that lays out a Maven project on disk."""

    def _make(
        root: Path,
        name: str = "demo",
        java_version: Optional[str] = "1.8",
        jupiter: bool = True,
        pom: bool = True,
        test_dir: bool = True,
        test_files: int = 1,
    ) -> Path:
        repo = Path(root) / name
        repo.mkdir(parents=True, exist_ok=True)
        (repo / "src" / "main" / "java").mkdir(parents=True, exist_ok=True)

        if pom:
            properties = ""
            if java_version is not None:
                properties = (
                    f"    <maven.compiler.source>{java_version}</maven.compiler.source>\n"
                    f"    <maven.compiler.target>{java_version}</maven.compiler.target>"
                )
            dependency = JUPITER_DEPENDENCY if jupiter else JUNIT4_DEPENDENCY
            (repo / "pom.xml").write_text(
                POM_TEMPLATE.format(name=name, properties=properties, dependencies=dependency),
                encoding="utf-8",
            )

        if test_dir:
            tests = repo / "src" / "test" / "java" / "com" / "example"
            tests.mkdir(parents=True, exist_ok=True)
            for i in range(test_files):
                (tests / f"Sample{i}Test.java").write_text("class Sample{i}Test {{}}\n".format(i=i))
        return repo

    return _make
