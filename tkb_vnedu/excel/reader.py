from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import pandas as pd

from ..models.grid import Grid

"""Spreadsheet reader: workbook bytes or path -> raw cell grid.

Sheets are parsed without a header (header=None) and without pandas' NA
string conversion, so "NA" or "N/A" typed in a cell stays text. Blank cells
come back as "" and rows keep the sheet's used width.
"""

__all__ = [
    "WorkbookReadError",
    "SheetNotFoundError",
    "SheetGrid",
    "Source",
    "list_sheet_names",
    "read_workbook",
    "read_grid",
    "dataframe_to_grid",
]

Source = Union[Path, str, bytes]


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or parsed."""


class SheetNotFoundError(Exception):
    """Raised when the requested sheet is not in the workbook."""


@dataclass
class SheetGrid:
    source_name: str  # file name, or "<bytes>"
    sheet_name: str
    grid: Grid

    @property
    def is_empty(self) -> bool:
        return not any(any(str(c).strip() for c in row) for row in self.grid)


def _open(source: Source) -> tuple[pd.ExcelFile, str]:
    try:
        if isinstance(source, (bytes, bytearray)):
            return pd.ExcelFile(io.BytesIO(source)), "<bytes>"
        path = Path(source)
        if not path.exists():
            raise WorkbookReadError(f"file not found: {path}")
        return pd.ExcelFile(path), path.name
    except WorkbookReadError:
        raise
    except Exception as e:  # pandas/openpyxl raise a mix of ValueError, BadZipFile, KeyError
        raise WorkbookReadError(f"cannot open workbook: {e}") from e


def _clean(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    # numpy scalars -> plain python numbers
    if hasattr(value, "item") and not hasattr(value, "isoformat"):
        return value.item()
    return value


def dataframe_to_grid(df: pd.DataFrame) -> Grid:
    return [[_clean(v) for v in row] for row in df.itertuples(index=False, name=None)]


def _parse(xls: pd.ExcelFile, sheet_name: str) -> Grid:
    df = xls.parse(sheet_name, header=None, dtype=object, keep_default_na=False, na_values=[])
    return dataframe_to_grid(df)


def list_sheet_names(source: Source) -> list[str]:
    xls, _ = _open(source)
    with xls:
        return [str(n) for n in xls.sheet_names]


def read_workbook(source: Source, target_sheets: Iterable[str] | None = None) -> dict[str, Grid]:
    """All sheets (or target_sheets only) keyed by sheet name, in workbook order."""
    xls, _ = _open(source)
    wanted = set(target_sheets) if target_sheets is not None else None
    grids: dict[str, Grid] = {}
    with xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            grids[str(name)] = _parse(xls, name)
    return grids


def read_grid(source: Source, sheet_name: str | None = None) -> SheetGrid:
    """One sheet as a grid; the first sheet when sheet_name is None."""
    xls, source_name = _open(source)
    with xls:
        names = [str(n) for n in xls.sheet_names]
        if not names:
            raise SheetNotFoundError(f"{source_name}: workbook has no sheets")
        target = sheet_name if sheet_name is not None else names[0]
        if target not in names:
            raise SheetNotFoundError(f"{source_name}: sheet '{target}' not found (available: {names})")
        try:
            grid = _parse(xls, target)
        except Exception as e:
            raise WorkbookReadError(f"{source_name}: cannot parse sheet '{target}': {e}") from e
    return SheetGrid(source_name=source_name, sheet_name=target, grid=grid)
