from __future__ import annotations

import re
from collections.abc import Sequence

from ..models.canonical_row import DAY_NAMES
from ..models.grid import Grid, GridColumnInfo, LayoutFamily, SessionCode, grid_cell, is_class_code
from .classifier import classify, find_header_row
from .normalize import normalize_text

"""Structural locators: find the anchors of a sheet without a fixed schema.

- header row and (class, session) column descriptors for GRID sheets
- day index of a free-text row label, plus the carry-over fold step
- class-name discovery per layout family
"""

__all__ = [
    "NOT_FOUND",
    "CLASS_SEARCH_ROWS",
    "find_header_row",
    "detect_session",
    "normalize_session",
    "build_column_infos",
    "detect_day_index",
    "carry_day",
    "is_meta_label",
    "find_class_cell",
    "extract_class_names",
]

NOT_FOUND = -1
CLASS_SEARCH_ROWS = 5
FIRST_DATA_COLUMN = 2  # GRID: col 0 = day, col 1 = period

_DIGITS = re.compile(r"(\d+)")
_SUNDAY_ALIASES = {"cn", "chu nhat", "chunhat"}
_THU_NUMBER = re.compile(r"^thu\s*\d+$")
_NGAY_WORD = re.compile(r"^ngay\b")


def detect_session(label: str) -> SessionCode:
    """Session from a GRID sub-header cell ("S", "Sáng", "C", "Chiều")."""
    text = normalize_text(label)
    if not text:
        return SessionCode.UNSPECIFIED
    if text == "s" or "sang" in text:
        return SessionCode.MORNING
    if text == "c" or "chieu" in text:
        return SessionCode.AFTERNOON
    return SessionCode.UNSPECIFIED


def normalize_session(label: str) -> str:
    """Session code for a ROW_WISE cell; unrecognised labels pass through verbatim."""
    code = detect_session(label)
    if code is SessionCode.UNSPECIFIED:
        return (label or "").strip()
    return code.value


def build_column_infos(grid: Grid, header_row: int) -> list[GridColumnInfo]:
    """Describe every data column of a GRID sheet.

    The class label of a merged header cell only sits in its first column, so
    the last non-blank label is carried to the right until a new one appears.
    Columns left of the first label are ignored, and a column is dropped only
    when its header, sub-header and all data cells are blank.
    """
    if header_row == NOT_FOUND or header_row >= len(grid):
        return []
    header = grid[header_row] or []
    sub_header = (grid[header_row + 1] or []) if header_row + 1 < len(grid) else []
    width = max(len(header), len(sub_header))

    def column_has_values(col: int) -> bool:
        return any(grid_cell(grid, r, col) for r in range(header_row + 2, len(grid)))

    infos: list[GridColumnInfo] = []
    current_class = ""
    for col in range(FIRST_DATA_COLUMN, width):
        header_val = grid_cell(grid, header_row, col)
        if header_val:
            current_class = header_val
        if not current_class:
            continue
        sub_val = grid_cell(grid, header_row + 1, col)
        if not header_val and not sub_val and not column_has_values(col):
            continue
        infos.append(
            GridColumnInfo(
                col_index=col,
                class_name=current_class,
                session_code=detect_session(sub_val),
            )
        )
    return infos


def detect_day_index(label: str, day_names: Sequence[str] = DAY_NAMES) -> int:
    """Map a day label onto 0..6 (Thứ 2 .. Chủ nhật), NOT_FOUND otherwise.

    Order: exact case-insensitive name, then the first number in the label
    (2..7 -> Monday..Saturday, 8 -> Sunday), then the Sunday spellings.
    Stateless; callers keep the carried day themselves (see carry_day).
    """
    lowered = (label or "").strip().lower()
    if not lowered:
        return NOT_FOUND
    for idx, name in enumerate(day_names):
        if name.lower() == lowered:
            return idx
    match = _DIGITS.search(lowered)
    if match:
        num = int(match.group(1))
        if 2 <= num <= 7:
            return num - 2
        if num == 8:
            return 6
    if normalize_text(lowered) in _SUNDAY_ALIASES:
        return 6
    return NOT_FOUND


def carry_day(current: int, label: str, day_names: Sequence[str] = DAY_NAMES) -> int:
    """One fold step of a row scan: the label's day if it has one, else current."""
    if not (label or "").strip():
        return current
    idx = detect_day_index(label, day_names)
    return idx if idx != NOT_FOUND else current


def is_meta_label(text: str) -> bool:
    """True for cells that label the sheet rather than hold a subject.

    Blank cells, day labels ("Thứ 2", "CN", bare 2..8) and date headers
    ("Ngày ...") count. Subject names that merely contain "thu" after
    diacritic stripping ("Thủ công", "Mĩ thuật") do not.
    """
    lowered = (text or "").strip().lower()
    if not lowered:
        return True
    if "ngày" in lowered or "thứ" in lowered or "chủ nhật" in lowered:
        return True
    norm = normalize_text(lowered)
    if norm in _SUNDAY_ALIASES:
        return True
    if _THU_NUMBER.match(norm) or _NGAY_WORD.match(norm):
        return True
    if lowered.isdigit():
        return 2 <= int(lowered) <= 8
    return False


def find_class_cell(grid: Grid, class_name: str, max_rows: int = CLASS_SEARCH_ROWS) -> tuple[int, int]:
    """(row, col) of the first cell equal to class_name in the top rows, or (-1, -1)."""
    target = (class_name or "").strip()
    if not target:
        return NOT_FOUND, NOT_FOUND
    for r in range(min(max_rows, len(grid))):
        for c in range(len(grid[r] or [])):
            if grid_cell(grid, r, c) == target:
                return r, c
    return NOT_FOUND, NOT_FOUND


def extract_class_names(grid: Grid, family: LayoutFamily | None = None) -> list[str]:
    """Class names present in a sheet, sorted ascending."""
    if family is None:
        family = classify(grid)
    names: set[str] = set()

    if family is LayoutFamily.GRID:
        header_row = find_header_row(grid)
        header = (grid[header_row] or []) if header_row != NOT_FOUND else []
        for c in range(FIRST_DATA_COLUMN, len(header)):
            value = grid_cell(grid, header_row, c)
            if value:
                names.add(value)
    elif family in (LayoutFamily.DAY_COLUMN, LayoutFamily.CLASS_HEADER):
        for r in range(min(CLASS_SEARCH_ROWS, len(grid))):
            for c in range(len(grid[r] or [])):
                value = grid_cell(grid, r, c)
                if is_class_code(value):
                    names.add(value)
    elif family is LayoutFamily.ROW_WISE:
        for r in range(1, len(grid)):
            value = grid_cell(grid, r, 0)
            if is_class_code(value):
                names.add(value)
    else:
        # Unknown layout: take column 0 at face value
        for r in range(1, len(grid)):
            value = grid_cell(grid, r, 0)
            if value:
                names.add(value)

    return sorted(names)
