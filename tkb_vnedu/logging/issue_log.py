from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.issue_record import IssueRecord

"""Issue log buffering.

Records are buffered in memory during a run and flushed once at the end to
<log_dir>/issues-YYYYMMDD-HHMMSS.log (UTC) as JSON Lines. Nothing is created
on disk for a run without issues.
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer of issue records; flush() appends them as JSON Lines."""

    def __init__(self, log_dir: Path = Path("logs")) -> None:
        self.log_dir = Path(log_dir)
        self._records: list[IssueRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.log_dir / f"issues-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[IssueRecord]:
        return list(self._records)

    def append(self, record: IssueRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
