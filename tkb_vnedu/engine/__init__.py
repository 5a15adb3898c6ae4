"""Format detection and transformation engine.

Pure functions over cell grids: no I/O, no logging, no persisted state.
"""

from .classifier import classify, find_header_row
from .locators import build_column_infos, detect_day_index, extract_class_names
from .normalize import normalize_key, normalize_text
from .resolver import SubjectResolver, resolve
from .transformer import TimetableAccumulator, transform_class, transform_separate, transform_single
from .vocabulary import EDU_SUBJECTS, auto_map, build_vocabulary

__all__ = [
    "normalize_text",
    "normalize_key",
    "classify",
    "find_header_row",
    "build_column_infos",
    "detect_day_index",
    "extract_class_names",
    "EDU_SUBJECTS",
    "auto_map",
    "build_vocabulary",
    "resolve",
    "SubjectResolver",
    "TimetableAccumulator",
    "transform_single",
    "transform_separate",
    "transform_class",
]
