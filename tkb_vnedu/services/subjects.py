from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..engine.classifier import classify, find_header_row
from ..engine.locators import extract_class_names, find_class_cell, is_meta_label
from ..engine.normalize import normalize_text
from ..engine.vocabulary import EDU_SUBJECTS, auto_map
from ..models.grid import Grid, LayoutFamily, grid_cell, parse_period
from ..models.subject_mapping import SubjectMapping

"""Subject catalogue: collect raw subjects from sheets and maintain the table.

The mapping table is a plain ordered list of SubjectMapping. Every helper here
returns a new list; callers decide when to persist it.
"""

__all__ = [
    "extract_subjects",
    "catalogue_entries",
    "merge_mappings",
    "apply_edits",
    "remove_mapping",
    "unmapped",
]


def extract_subjects(grid: Grid, family: LayoutFamily | None = None) -> list[str]:
    """Distinct raw subject texts of a sheet, sorted by normalized text."""
    if family is None:
        family = classify(grid)
    found: set[str] = set()

    if family is LayoutFamily.GRID:
        header_row = find_header_row(grid)
        for r in range(header_row + 1, len(grid)):
            row = grid[r] or []
            if len(row) < 2 or parse_period(row[1]) is None:
                continue
            for c in range(2, len(row)):
                cell = grid_cell(grid, r, c)
                if cell:
                    found.add(cell)
    elif family in (LayoutFamily.DAY_COLUMN, LayoutFamily.CLASS_HEADER):
        # only the class columns; label and period columns are skipped
        for class_name in extract_class_names(grid, family):
            header_row, col = find_class_cell(grid, class_name)
            for r in range(header_row + 1, len(grid)):
                cell = grid_cell(grid, r, col)
                if cell and not cell.isdigit() and not is_meta_label(cell):
                    found.add(cell)
    else:
        for r in range(1, len(grid)):
            for c in range(3, 10):
                cell = grid_cell(grid, r, c)
                if cell:
                    found.add(cell)

    return sorted(found, key=lambda s: (normalize_text(s), s))


def catalogue_entries(raws: Iterable[str], vocabulary: Sequence[str] = EDU_SUBJECTS) -> list[SubjectMapping]:
    """Fresh table entries for raw subjects, pre-filled from the vocabulary."""
    return [SubjectMapping(raw=raw, canonical=auto_map(raw, vocabulary)) for raw in raws]


def merge_mappings(*tables: Iterable[SubjectMapping]) -> list[SubjectMapping]:
    """Upsert keyed by case-insensitive raw text; first seen entry wins."""
    merged: list[SubjectMapping] = []
    seen: set[str] = set()
    for table in tables:
        for entry in table:
            key = entry.key
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(entry)
    return merged


def apply_edits(table: Iterable[SubjectMapping], edits: Mapping[str, str]) -> list[SubjectMapping]:
    """Apply user edits (raw -> canonical).

    Matching entries get the new canonical name and become user-defined;
    edits for unknown raw texts are appended in edit order.
    """
    pending = {raw.strip().lower(): (raw.strip(), canonical.strip()) for raw, canonical in edits.items() if raw.strip()}
    out: list[SubjectMapping] = []
    for entry in table:
        edit = pending.pop(entry.key, None)
        out.append(entry.with_canonical(edit[1]) if edit else entry)
    for raw, canonical in pending.values():
        out.append(SubjectMapping(raw=raw, canonical=canonical, is_user_defined=True))
    return out


def remove_mapping(table: Iterable[SubjectMapping], raw: str) -> list[SubjectMapping]:
    key = raw.strip().lower()
    return [entry for entry in table if entry.key != key]


def unmapped(table: Iterable[SubjectMapping]) -> list[SubjectMapping]:
    return [entry for entry in table if not entry.is_mapped]
