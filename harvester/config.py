import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_SEARCH_QUERY = "language:java maven junit5 java8 in:readme,description"
DEFAULT_REQUIRED_TOOLS = ["git", "mvn", "java", "javac"]


class HarvestConfig(BaseModel):
    """
    Everything a harvest run can be tuned with.
    Built once by the CLI and handed to the search client and the pipeline.
    """
    token: Optional[str] = Field(None, description="GitHub token for authenticated search requests.")
    clone_dir: Path = Field(Path("./cloned_repos"), description="Where validated repositories are kept.")
    max_repos: int = Field(500, gt=0, description="Maximum number of candidates to process.")
    max_pages: int = Field(50, gt=0, description="Maximum number of search pages to fetch.")
    per_page: int = Field(100, gt=0, le=100, description="Search page size.")
    page_delay: float = Field(1.0, ge=0, description="Seconds to wait between search pages.")

    search_query: str = Field(DEFAULT_SEARCH_QUERY, description="GitHub repository search expression.")
    java_version: str = Field("1.8", description="Java version the pom.xml must target, if it declares one.")
    test_framework_marker: str = Field("junit-jupiter", description="Substring identifying the test framework dependency.")

    build_tool: str = Field("mvn", description="Build tool executable.")
    build_timeout: Optional[float] = Field(None, gt=0, description="Compile timeout in seconds, None for unbounded.")
    test_timeout: float = Field(300, gt=0, description="Test suite timeout in seconds.")
    required_tools: List[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_TOOLS))

    log_file: Path = Field(Path("./repo_validation.log"))
    validated_list: Path = Field(Path("./validated_repos.txt"))
    pending_list: Path = Field(Path("./repo_urls.tmp"))

    @classmethod
    def from_env(cls, **overrides) -> "HarvestConfig":
        """Load `.env`, take GITHUB_TOKEN as the default token and apply explicit overrides."""
        load_dotenv()
        values = {"token": os.getenv("GITHUB_TOKEN") or None}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
