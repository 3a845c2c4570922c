from pydantic import BaseModel, ConfigDict, Field


def repo_dirname(clone_location: str) -> str:
    """Local directory name for a clone URL: its base name without the `.git` suffix."""
    base = clone_location.rstrip("/").rsplit("/", 1)[-1]
    # scp-style remotes (git@host:owner/repo.git) have no slash before the owner
    base = base.rsplit(":", 1)[-1]
    if base.endswith(".git"):
        base = base[: -len(".git")]
    return base


class RepositoryCandidate(BaseModel):
    """
    A repository returned by search, not yet validated.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Repository identifier, e.g. 'owner/repo'.")
    clone_location: str = Field(..., description="Clone URL of the repository.")

    @property
    def dirname(self) -> str:
        return repo_dirname(self.clone_location)


class ValidatedRecord(BaseModel):
    """
    A repository that passed every pipeline stage.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    clone_location: str

    @classmethod
    def from_candidate(cls, candidate: RepositoryCandidate) -> "ValidatedRecord":
        return cls(name=candidate.name, clone_location=candidate.clone_location)
