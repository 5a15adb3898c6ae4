from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

"""SubjectMapping model: one row of the user-editable subject table.

raw is the literal cell text as first observed (kept for display and exact
re-matching), canonical is the controlled-vocabulary name ("Tên môn học Edu"),
empty until resolved. The persisted JSON form keeps the original field names
(raw / edu / custom) so existing mapping files stay readable.
"""

__all__ = [
    "SubjectMapping",
]


@dataclass(frozen=True)
class SubjectMapping:
    raw: str
    canonical: str = ""
    is_user_defined: bool = False

    @property
    def key(self) -> str:
        """Case-insensitive identity used for de-duplication."""
        return self.raw.strip().lower()

    @property
    def is_mapped(self) -> bool:
        return bool(self.canonical.strip())

    def with_canonical(self, canonical: str, *, user_defined: bool = True) -> SubjectMapping:
        return replace(self, canonical=canonical, is_user_defined=user_defined)

    def to_dict(self) -> dict[str, Any]:
        return {"raw": self.raw, "edu": self.canonical, "custom": self.is_user_defined}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> SubjectMapping:
        return SubjectMapping(
            raw=str(data.get("raw") or ""),
            canonical=str(data.get("edu") or data.get("canonical") or ""),
            is_user_defined=bool(data.get("custom", False)),
        )
