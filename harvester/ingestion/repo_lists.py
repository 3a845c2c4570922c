"""
Flat, line-oriented lists that outlive a single candidate.

PendingList   - candidates still to process, one `name|clone_url` per line.
ValidatedList - repositories that passed every stage, one `name | clone_url`
                per line under a comment header. Append-only.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

from harvester.models.candidate import RepositoryCandidate, ValidatedRecord

logger = logging.getLogger(__name__)

VALIDATED_HEADER = [
    "# Validated Java repositories",
    "# Format: name | clone_url",
]


def _data_lines(path: Path) -> List[str]:
    if not path.exists():
        return []
    lines = []
    with path.open(encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            lines.append(line)
    return lines


def _split_entry(line: str) -> Tuple[str, str]:
    name, sep, url = line.partition("|")
    if not sep:
        # bare clone URL
        return line, line
    return name.strip(), url.strip()


class PendingList:
    def __init__(self, path: Path):
        self.path = Path(path)

    def write(self, candidates: Iterable[RepositoryCandidate]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            for c in candidates:
                f.write(f"{c.name}|{c.clone_location}\n")

    def read(self) -> List[RepositoryCandidate]:
        entries = []
        for line in _data_lines(self.path):
            name, url = _split_entry(line)
            entries.append(RepositoryCandidate(name=name, clone_location=url))
        return entries

    def remove(self, candidate: RepositoryCandidate) -> None:
        """Drop a finished candidate; the remaining entries keep their order."""
        remaining = [c for c in self.read() if c.clone_location != candidate.clone_location]
        self.write(remaining)

    def discard(self) -> None:
        if self.path.exists():
            self.path.unlink()


class ValidatedList:
    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure(self) -> None:
        """Create the list with its header if this is the first run."""
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write("\n".join(VALIDATED_HEADER) + "\n")

    def read(self) -> List[ValidatedRecord]:
        records = []
        for line in _data_lines(self.path):
            name, url = _split_entry(line)
            records.append(ValidatedRecord(name=name, clone_location=url))
        return records

    def __contains__(self, clone_location: str) -> bool:
        return any(r.clone_location == clone_location for r in self.read())

    def append(self, record: ValidatedRecord) -> bool:
        """Append a record. Returns False if its clone URL is already listed."""
        self.ensure()
        if record.clone_location in self:
            logger.info(f"{record.name} is already in {self.path}, not adding it again")
            return False
        with self.path.open("a", encoding="utf-8") as f:
            f.write(f"{record.name} | {record.clone_location}\n")
        return True
