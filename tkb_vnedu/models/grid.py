from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

"""Cell grid primitives for the TKB normalizer.

A grid is what the spreadsheet reader hands over: a row-major list of rows,
each a list of untyped cells (text, number or blank). Rows may be ragged; any
position past the end of a row reads as blank.

Everything downstream compares on text, so this module owns the single
boundary conversion (cell_text) and the one fallible numeric conversion the
engine needs (parse_period).
"""

__all__ = [
    "Cell",
    "Grid",
    "LayoutFamily",
    "SessionCode",
    "GridColumnInfo",
    "CLASS_CODE_PATTERN",
    "cell_text",
    "grid_cell",
    "is_class_code",
    "parse_period",
    "row_is_blank",
]

Cell = Union[str, int, float, None]
Grid = list[list[Cell]]

# e.g. 10A1, 6A12 (digits, one uppercase letter, digits)
CLASS_CODE_PATTERN = re.compile(r"^\d+[A-Z]\d+$")


class LayoutFamily(Enum):
    """Layout conventions a timetable sheet can follow.

    - GRID: columns are (class x session), rows are (day, period)
    - DAY_COLUMN: day labels down column 0, class codes across the top
    - CLASS_HEADER: class codes across the top, label rows separate days
    - ROW_WISE: one row per (class, session, period) with 7 day columns
    - UNKNOWN: nothing matched; handled like ROW_WISE
    """
    GRID = "grid"
    DAY_COLUMN = "day_column"
    CLASS_HEADER = "class_header"
    ROW_WISE = "row_wise"
    UNKNOWN = "unknown"


class SessionCode(Enum):
    """Buổi (half-day session). Values are the codes written to the output."""
    MORNING = "S"
    AFTERNOON = "C"
    UNSPECIFIED = ""

    @property
    def rank(self) -> int:
        return _SESSION_RANK[self]


_SESSION_RANK = {
    SessionCode.MORNING: 0,
    SessionCode.AFTERNOON: 1,
    SessionCode.UNSPECIFIED: 2,
}


@dataclass(frozen=True)
class GridColumnInfo:
    """One data column of a GRID sheet."""
    col_index: int  # 0-based column in the grid
    class_name: str  # class label, carried over merged header cells
    session_code: SessionCode  # from the sub-header row


def cell_text(value: Cell) -> str:
    """Return the trimmed text of a cell.

    Blank cells (None, NaN, whitespace) give "". Integral floats render without
    the trailing ".0" because pandas hands back 3.0 for a cell typed as 3.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value).strip()


def grid_cell(grid: Grid, row: int, col: int) -> str:
    """Text at (row, col), blank when either index falls outside the grid."""
    if row < 0 or row >= len(grid):
        return ""
    cells = grid[row] or []
    if col < 0 or col >= len(cells):
        return ""
    return cell_text(cells[col])


def row_is_blank(cells: list[Cell]) -> bool:
    return all(cell_text(c) == "" for c in cells)


def is_class_code(text: str) -> bool:
    return bool(CLASS_CODE_PATTERN.match(text.strip()))


def parse_period(value: Cell, upper: int | None = None) -> int | None:
    """Parse a period (tiết) number.

    Returns None when the cell is not a positive integer: blanks, free text,
    zero, negatives and non-integral numbers are all rejected rather than
    defaulted. ``upper`` optionally caps the accepted value.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or not number.is_integer() or number < 1:
        return None
    period = int(number)
    if upper is not None and period > upper:
        return None
    return period
