from __future__ import annotations

from dataclasses import dataclass

"""Canonical output row (one line of the VNEDU import sheet)."""

__all__ = [
    "DAY_NAMES",
    "OUTPUT_HEADER",
    "CanonicalRow",
]

# Index 0..6, Monday first, Sunday last
DAY_NAMES: tuple[str, ...] = (
    "Thứ 2",
    "Thứ 3",
    "Thứ 4",
    "Thứ 5",
    "Thứ 6",
    "Thứ 7",
    "Chủ nhật",
)

OUTPUT_HEADER: tuple[str, ...] = ("Lớp học", "Buổi", "Tiết thứ", *DAY_NAMES)


@dataclass(frozen=True)
class CanonicalRow:
    """(class, session, period, day0..day6). Created at linearization only."""
    class_name: str
    session: str  # "S" / "C" / "" or a passed-through label
    period: int  # >= 1
    days: tuple[str, ...]  # always len(DAY_NAMES)

    def __post_init__(self) -> None:
        if len(self.days) != len(DAY_NAMES):
            raise ValueError(f"expected {len(DAY_NAMES)} day values, got {len(self.days)}")

    def to_list(self) -> list[object]:
        return [self.class_name, self.session, self.period, *self.days]
