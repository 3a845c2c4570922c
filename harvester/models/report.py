from pydantic import BaseModel, Field


class RunReport(BaseModel):
    """
    Summary of one harvest run. Printed at the end, never persisted.
    """
    succeeded: int = Field(0, ge=0, description="Candidates validated and kept.")
    failed: int = Field(0, ge=0, description="Candidates rejected and removed.")

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def success_rate(self) -> float:
        """Percentage of processed candidates that were kept."""
        if self.total == 0:
            return 0.0
        return self.succeeded * 100 / self.total

    def render(self, clone_dir: str, log_file: str) -> str:
        lines = [
            "",
            "=" * 34,
            "REPOSITORY VALIDATION SUMMARY",
            "=" * 34,
            f"Total repositories processed: {self.total}",
            f"Successfully validated: {self.succeeded}",
            f"Failed validation (removed): {self.failed}",
            f"Success rate: {self.success_rate:.1f}%",
            "",
            f"Validated repositories are stored in: {clone_dir}",
            f"Full log available at: {log_file}",
            "=" * 34,
        ]
        return "\n".join(lines)
