from __future__ import annotations

import io
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO, Union

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..models.canonical_row import OUTPUT_HEADER, CanonicalRow

"""Spreadsheet writer for the VNEDU import sheet.

One sheet named TKB_VNEDU: the canonical header followed by the data rows.
Layout follows what VNEDU users get from the import template: centered Arial
cells, a bold white-on-blue header, narrow key columns, wide day columns.
"""

__all__ = [
    "OutputWriteError",
    "SHEET_NAME",
    "build_output_rows",
    "write_workbook",
    "to_xlsx_bytes",
]

SHEET_NAME = "TKB_VNEDU"
KEY_COLUMN_WIDTH = 12
DAY_COLUMN_WIDTH = 22
ROW_HEIGHT = 24

_HEADER_FONT = Font(name="Arial", bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill("solid", fgColor="4F81BD")
_BODY_FONT = Font(name="Arial")
_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
_THIN = Side(style="thin", color="CCCCCC")
_HEADER_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)


class OutputWriteError(Exception):
    """Raised when the output workbook cannot be written."""


def build_output_rows(rows: Iterable[CanonicalRow]) -> list[list[object]]:
    """Header row + one list per canonical row."""
    return [list(OUTPUT_HEADER), *(row.to_list() for row in rows)]


def _style_sheet(ws, n_rows: int, n_cols: int) -> None:
    for r in range(1, n_rows + 1):
        ws.row_dimensions[r].height = ROW_HEIGHT
        for c in range(1, n_cols + 1):
            cell = ws.cell(row=r, column=c)
            if cell.value is None:
                cell.value = ""
            cell.alignment = _CENTER
            cell.font = _BODY_FONT
    for c in range(1, n_cols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.border = _HEADER_BORDER
        width = KEY_COLUMN_WIDTH if c <= 3 else DAY_COLUMN_WIDTH
        ws.column_dimensions[get_column_letter(c)].width = width


def write_workbook(rows: Iterable[CanonicalRow], target: Union[Path, str, BinaryIO]) -> int:
    """Write the canonical rows to target; returns the number of data rows."""
    header, *data = build_output_rows(rows)
    df = pd.DataFrame(data, columns=header)
    try:
        if isinstance(target, (str, Path)):
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(target, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
            _style_sheet(writer.sheets[SHEET_NAME], len(data) + 1, len(header))
    except Exception as e:  # OSError for locked/directory targets, ValueError/BadZipFile from pandas
        raise OutputWriteError(f"cannot write {target}: {e}") from e
    return len(data)


def to_xlsx_bytes(rows: Iterable[CanonicalRow]) -> bytes:
    buf = io.BytesIO()
    write_workbook(rows, buf)
    return buf.getvalue()
