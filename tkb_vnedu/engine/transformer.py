from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.canonical_row import DAY_NAMES, CanonicalRow
from ..models.grid import (
    Grid,
    GridColumnInfo,
    LayoutFamily,
    SessionCode,
    grid_cell,
    parse_period,
    row_is_blank,
)
from ..models.subject_mapping import SubjectMapping
from .classifier import classify, find_header_row
from .locators import (
    NOT_FOUND,
    build_column_infos,
    carry_day,
    extract_class_names,
    find_class_cell,
    is_meta_label,
    normalize_session,
)
from .resolver import SubjectResolver
from .vocabulary import EDU_SUBJECTS

"""Grid transformer: walk a classified sheet and emit canonical rows.

Two entry modes:
- transform_single: one sheet holds every class and both sessions
- transform_separate: a morning sheet and an afternoon sheet, each forced to
  its own session code, merged class by class

GRID, DAY_COLUMN and CLASS_HEADER sheets are accumulated into a sparse
class -> session -> period -> day map and linearized with dense periods.
ROW_WISE (and UNKNOWN) sheets already hold one row per period and are only
re-ordered.
"""

__all__ = [
    "MAX_PERIOD",
    "ROW_WISE_FIRST_DAY_COL",
    "TimetableAccumulator",
    "session_sort_key",
    "transform_single",
    "transform_separate",
    "transform_class",
]

MAX_PERIOD = 20
ROW_WISE_FIRST_DAY_COL = 3
DAY_COUNT = len(DAY_NAMES)


def session_sort_key(code: str) -> tuple[int, str]:
    """Morning < Afternoon < anything else, then by text for a stable order."""
    upper = (code or "").upper()
    if upper == SessionCode.MORNING.value:
        return (SessionCode.MORNING.rank, upper)
    if upper == SessionCode.AFTERNOON.value:
        return (SessionCode.AFTERNOON.rank, upper)
    return (SessionCode.UNSPECIFIED.rank, upper)


class TimetableAccumulator:
    """Sparse class -> session -> period -> day -> subject map for one run.

    Buckets are created on first write and never removed. An empty subject
    never overwrites a value already stored in the same slot.
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[int, dict[int, str]]]] = {}

    def ensure_period(self, class_name: str, session: str, period: int) -> dict[int, str]:
        sessions = self._data.setdefault(class_name, {})
        periods = sessions.setdefault(session, {})
        return periods.setdefault(period, {})

    def put(self, class_name: str, session: str, period: int, day: int, subject: str) -> None:
        bucket = self.ensure_period(class_name, session, period)
        if day < 0 or day >= DAY_COUNT:
            return
        if subject or day not in bucket:
            bucket[day] = subject

    def get(self, class_name: str, session: str, period: int, day: int) -> str:
        return self._data.get(class_name, {}).get(session, {}).get(period, {}).get(day, "")

    @property
    def class_names(self) -> list[str]:
        return sorted(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def linearize(self) -> list[CanonicalRow]:
        """Rows ordered by class, session rank and period 1..max (gaps kept)."""
        rows: list[CanonicalRow] = []
        for class_name in sorted(self._data):
            sessions = self._data[class_name]
            for session in sorted(sessions, key=session_sort_key):
                periods = sessions[session]
                max_period = max(periods) if periods else 0
                for period in range(1, max_period + 1):
                    slots = periods.get(period, {})
                    days = tuple(slots.get(d, "") for d in range(DAY_COUNT))
                    rows.append(CanonicalRow(class_name, session, period, days))
        return rows


def _resolver_for(
    table: Iterable[SubjectMapping] | SubjectResolver,
    vocabulary: Sequence[str],
) -> SubjectResolver:
    if isinstance(table, SubjectResolver):
        return table
    return SubjectResolver(table, vocabulary)


def _accumulate_grid(
    grid: Grid,
    header_row: int,
    columns: Sequence[GridColumnInfo],
    resolver: SubjectResolver,
    acc: TimetableAccumulator,
    forced_session: str | None = None,
) -> None:
    day = NOT_FOUND
    for r in range(header_row + 1, len(grid)):
        day = carry_day(day, grid_cell(grid, r, 0))
        row = grid[r] or []
        period = parse_period(row[1]) if len(row) > 1 else None
        if period is None:
            continue
        for info in columns:
            session = forced_session if forced_session is not None else info.session_code.value
            acc.ensure_period(info.class_name, session, period)
            if day == NOT_FOUND:
                # period rows above the first day label have no slot
                continue
            acc.put(info.class_name, session, period, day, resolver(grid_cell(grid, r, info.col_index)))


def _row_wise_days(grid: Grid, r: int, resolver: SubjectResolver) -> tuple[str, ...]:
    return tuple(
        resolver(grid_cell(grid, r, c))
        for c in range(ROW_WISE_FIRST_DAY_COL, ROW_WISE_FIRST_DAY_COL + DAY_COUNT)
    )


def _transform_row_wise(grid: Grid, resolver: SubjectResolver) -> list[CanonicalRow]:
    groups: dict[tuple[str, str], list[CanonicalRow]] = {}
    for r in range(1, len(grid)):
        row = grid[r] or []
        if len(row) < 3 or row_is_blank(row):
            continue
        period = parse_period(row[2])
        if period is None:
            continue
        class_name = grid_cell(grid, r, 0)
        session = normalize_session(grid_cell(grid, r, 1))
        groups.setdefault((class_name, session), []).append(
            CanonicalRow(class_name, session, period, _row_wise_days(grid, r, resolver))
        )
    rows: list[CanonicalRow] = []
    for key in sorted(groups):
        # sorted() is stable: equal periods keep sheet order
        rows.extend(sorted(groups[key], key=lambda row: row.period))
    return rows


def transform_single(
    grid: Grid,
    table: Iterable[SubjectMapping] | SubjectResolver = (),
    vocabulary: Sequence[str] = EDU_SUBJECTS,
    family: LayoutFamily | None = None,
) -> list[CanonicalRow]:
    """Normalize a sheet that carries both sessions for every class."""
    resolver = _resolver_for(table, vocabulary)
    if family is None:
        family = classify(grid)
    if family is LayoutFamily.GRID:
        header_row = find_header_row(grid)
        acc = TimetableAccumulator()
        _accumulate_grid(grid, header_row, build_column_infos(grid, header_row), resolver, acc)
        return acc.linearize()
    return _transform_row_wise(grid, resolver)


def _grid_class_rows(
    grid: Grid, class_name: str, session: SessionCode, resolver: SubjectResolver
) -> list[CanonicalRow]:
    header_row = find_header_row(grid)
    columns = [c for c in build_column_infos(grid, header_row) if c.class_name == class_name]
    if not columns:
        return []
    matching = [c for c in columns if c.session_code is session]
    # sheets that never mark the session are taken as all-<session>
    target = matching or columns
    acc = TimetableAccumulator()
    _accumulate_grid(grid, header_row, target, resolver, acc, forced_session=session.value)
    return acc.linearize()


def _column_class_rows(
    grid: Grid, class_name: str, session: SessionCode, resolver: SubjectResolver
) -> list[CanonicalRow]:
    header_row, col = find_class_cell(grid, class_name)
    if col == NOT_FOUND:
        return []
    acc = TimetableAccumulator()
    next_slot: dict[int, int] = {}
    day = NOT_FOUND
    for r in range(header_row + 1, len(grid)):
        row = grid[r] or []
        day = carry_day(day, grid_cell(grid, r, 0))
        if day == NOT_FOUND or row_is_blank(row[1:]):
            continue
        period = parse_period(row[1], upper=MAX_PERIOD) if len(row) > 1 else None
        if period is None:
            # no period column: rows under one day label fill periods 1, 2, ...
            period = next_slot.get(day, 0) + 1
        next_slot[day] = max(next_slot.get(day, 0), period)
        raw = grid_cell(grid, r, col)
        if is_meta_label(raw):
            continue
        acc.put(class_name, session.value, period, day, resolver(raw))
    return acc.linearize()


def _row_wise_class_rows(
    grid: Grid, class_name: str, session: SessionCode, resolver: SubjectResolver
) -> list[CanonicalRow]:
    rows: list[CanonicalRow] = []
    for r in range(1, len(grid)):
        row = grid[r] or []
        if len(row) < 3:
            continue
        label = grid_cell(grid, r, 0)
        if is_meta_label(label) or label != class_name:
            continue
        period = parse_period(row[2])
        if period is None:
            continue
        rows.append(CanonicalRow(class_name, session.value, period, _row_wise_days(grid, r, resolver)))
    return sorted(rows, key=lambda row: row.period)


def transform_class(
    grid: Grid,
    class_name: str,
    session: SessionCode,
    table: Iterable[SubjectMapping] | SubjectResolver = (),
    vocabulary: Sequence[str] = EDU_SUBJECTS,
    family: LayoutFamily | None = None,
) -> list[CanonicalRow]:
    """Rows of one class from a single-session sheet, session forced.

    A class that cannot be located gives [] rather than an error.
    """
    if not grid:
        return []
    resolver = _resolver_for(table, vocabulary)
    if family is None:
        family = classify(grid)
    if family is LayoutFamily.GRID:
        return _grid_class_rows(grid, class_name, session, resolver)
    if family in (LayoutFamily.DAY_COLUMN, LayoutFamily.CLASS_HEADER):
        return _column_class_rows(grid, class_name, session, resolver)
    return _row_wise_class_rows(grid, class_name, session, resolver)


def transform_separate(
    morning: Grid | None,
    afternoon: Grid | None,
    table: Iterable[SubjectMapping] | SubjectResolver = (),
    vocabulary: Sequence[str] = EDU_SUBJECTS,
) -> list[CanonicalRow]:
    """Merge a morning sheet (forced "S") and an afternoon sheet (forced "C").

    Classes are the sorted union of both sheets; for each class the morning
    rows come before the afternoon rows. Either sheet may be missing.
    """
    resolver = _resolver_for(table, vocabulary)
    inputs: list[tuple[Grid, SessionCode, LayoutFamily, set[str]]] = []
    for grid, session in ((morning, SessionCode.MORNING), (afternoon, SessionCode.AFTERNOON)):
        if not grid:
            continue
        family = classify(grid)
        inputs.append((grid, session, family, set(extract_class_names(grid, family))))

    all_classes = sorted(set().union(*(names for *_, names in inputs)))
    rows: list[CanonicalRow] = []
    for class_name in all_classes:
        for grid, session, family, names in inputs:
            if class_name in names:
                rows.extend(transform_class(grid, class_name, session, resolver, family=family))
    return rows
