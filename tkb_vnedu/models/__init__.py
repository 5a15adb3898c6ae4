"""Domain models for the TKB -> VNEDU timetable normalizer.

This package contains the value types shared by the engine, the Excel
collaborators and the orchestration services.
"""

from .canonical_row import DAY_NAMES, OUTPUT_HEADER, CanonicalRow
from .grid import (
    Cell,
    Grid,
    GridColumnInfo,
    LayoutFamily,
    SessionCode,
    cell_text,
    grid_cell,
    is_class_code,
    parse_period,
)
from .issue_record import IssueRecord
from .processing_result import InputStat, ProcessingResult
from .subject_mapping import SubjectMapping

__all__ = [
    # Grid primitives
    "Cell",
    "Grid",
    "GridColumnInfo",
    "LayoutFamily",
    "SessionCode",
    "cell_text",
    "grid_cell",
    "is_class_code",
    "parse_period",
    # Output
    "DAY_NAMES",
    "OUTPUT_HEADER",
    "CanonicalRow",
    # Subject table
    "SubjectMapping",
    # Run results
    "InputStat",
    "IssueRecord",
    "ProcessingResult",
]
