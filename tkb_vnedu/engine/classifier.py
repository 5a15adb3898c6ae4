from __future__ import annotations

from collections.abc import Callable

from ..models.grid import Grid, LayoutFamily, grid_cell, is_class_code
from .normalize import normalize_text

"""Layout classifier.

Each is_*_format predicate looks at a bounded window at the top-left of the
sheet. classify() walks them as one priority-ordered decision list so that a
caller only ever sees a single family, even for sheets where the day-column
and class-header predicates both hold.
"""

__all__ = [
    "HEADER_SEARCH_ROWS",
    "classify",
    "find_header_row",
    "is_grid_format",
    "is_day_column_format",
    "is_class_header_format",
    "is_row_wise_format",
]

HEADER_SEARCH_ROWS = 12
CLASS_SCAN_ROWS = 3
CLASS_SCAN_COLS = 12
DAY_SCAN_ROWS = 10
MIN_CLASS_CODES = 3
MIN_DAY_ROWS = 3
MIN_ROW_WISE_CLASSES = 2


def _looks_like_grid_header(first: str, second: str) -> bool:
    a = normalize_text(first)
    b = normalize_text(second)
    return ("ngay" in a or "thu" in a) and "tiet" in b


def find_header_row(grid: Grid) -> int:
    """Index of the "Ngày/Thứ | Tiết" header row within the first 12 rows, or -1."""
    for r in range(min(HEADER_SEARCH_ROWS, len(grid))):
        if _looks_like_grid_header(grid_cell(grid, r, 0), grid_cell(grid, r, 1)):
            return r
    return -1


def is_grid_format(grid: Grid) -> bool:
    return find_header_row(grid) != -1


def _class_codes_in_row(grid: Grid, r: int) -> int:
    row = grid[r] or []
    return sum(1 for c in range(min(CLASS_SCAN_COLS, len(row))) if is_class_code(grid_cell(grid, r, c)))


def is_class_header_format(grid: Grid) -> bool:
    """A row among the first 3 holds at least 3 class codes."""
    for r in range(min(CLASS_SCAN_ROWS, len(grid))):
        if _class_codes_in_row(grid, r) >= MIN_CLASS_CODES:
            return True
    return False


def is_day_column_format(grid: Grid) -> bool:
    """Day labels down column 0 and class codes across the first rows.

    Class codes are counted over the whole 3 x 12 window, not per row.
    """
    day_rows = 0
    for r in range(min(DAY_SCAN_ROWS, len(grid))):
        first = normalize_text(grid_cell(grid, r, 0))
        if "thu" in first or "chu nhat" in first:
            day_rows += 1
    class_codes = sum(_class_codes_in_row(grid, r) for r in range(min(CLASS_SCAN_ROWS, len(grid))))
    return day_rows >= MIN_DAY_ROWS and class_codes >= MIN_CLASS_CODES


def is_row_wise_format(grid: Grid) -> bool:
    """At least 2 class codes in column 0 of rows 1..11."""
    hits = 0
    for r in range(1, min(HEADER_SEARCH_ROWS, len(grid))):
        if is_class_code(grid_cell(grid, r, 0)):
            hits += 1
    return hits >= MIN_ROW_WISE_CLASSES


# Priority order; first predicate that holds wins
_DECISION_LIST: tuple[tuple[Callable[[Grid], bool], LayoutFamily], ...] = (
    (is_grid_format, LayoutFamily.GRID),
    (is_day_column_format, LayoutFamily.DAY_COLUMN),
    (is_class_header_format, LayoutFamily.CLASS_HEADER),
    (is_row_wise_format, LayoutFamily.ROW_WISE),
)


def classify(grid: Grid) -> LayoutFamily:
    """Return the layout family of ``grid`` (UNKNOWN when nothing matches)."""
    for predicate, family in _DECISION_LIST:
        if predicate(grid):
            return family
    return LayoutFamily.UNKNOWN
