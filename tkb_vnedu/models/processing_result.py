from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

"""Processing result models for one conversion run.

ProcessingResult is what the orchestrator returns to the CLI; it carries the
numbers the SUMMARY line prints plus the per-input details used in tests.
"""

__all__ = [
    "InputStat",
    "ProcessingResult",
]


@dataclass(frozen=True)
class InputStat:
    """Per-input-sheet statistics."""
    file_name: str
    sheet_name: str
    session: str  # "S" / "C" for dual-file inputs, "" for a single file
    layout: str  # LayoutFamily value
    rows: int  # grid rows read
    classes: int  # class names detected


@dataclass(frozen=True)
class ProcessingResult:
    mode: str  # "single" | "separate"
    classes: int  # distinct classes in the output
    output_rows: int  # canonical data rows (header excluded)
    subjects: int  # entries in the mapping table after the run
    unmapped: int  # entries still without a canonical name
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    output_path: Path | None = None  # None when nothing was written
    written: bool = False
    inputs: list[InputStat] = field(default_factory=list)
    unmapped_subjects: list[str] = field(default_factory=list)
