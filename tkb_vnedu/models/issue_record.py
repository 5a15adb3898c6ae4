from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the run issue log.

One record per problem worth a human look after a conversion: a subject that
could not be mapped onto the vocabulary, a class that produced no rows, an
input sheet with no cells. row=-1 marks records that are not tied to a row.
"""

__all__ = [
    "IssueRecord",
    "UNMAPPED_SUBJECT",
    "CLASS_WITHOUT_ROWS",
    "EMPTY_SHEET",
]

UNMAPPED_SUBJECT = "UNMAPPED_SUBJECT"
CLASS_WITHOUT_ROWS = "CLASS_WITHOUT_ROWS"
EMPTY_SHEET = "EMPTY_SHEET"


@dataclass(frozen=True)
class IssueRecord:
    """Structured issue record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: input workbook name
        sheet: sheet name within the workbook
        row: 0-based grid row, -1 when not row-specific
        issue_type: classification in UPPER_SNAKE_CASE
        message: human readable detail
    """
    timestamp: str
    file: str
    sheet: str
    row: int
    issue_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, issue_type: str, message: str) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
