from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig
from ..engine.classifier import classify
from ..engine.locators import extract_class_names
from ..engine.resolver import SubjectResolver
from ..engine.transformer import transform_separate, transform_single
from ..excel.reader import SheetGrid, SheetNotFoundError, Source, WorkbookReadError, read_grid
from ..excel.writer import write_workbook
from ..logging.issue_log import IssueLogBuffer
from ..models.canonical_row import CanonicalRow
from ..models.grid import LayoutFamily, SessionCode
from ..models.issue_record import CLASS_WITHOUT_ROWS, EMPTY_SHEET, UNMAPPED_SUBJECT, IssueRecord
from ..models.processing_result import InputStat, ProcessingResult
from ..models.subject_mapping import SubjectMapping
from ..storage.mapping_store import MappingStore
from .progress import ProgressTracker
from .subjects import catalogue_entries, extract_subjects, merge_mappings

"""Run orchestration: read -> build subject table -> transform -> write -> persist.

run_single handles one workbook holding the whole day; run_separate handles a
morning and an afternoon workbook. Both:
1. read every input sheet (progress bar on a TTY)
2. classify each sheet and log what was found
3. build the mapping table: stored entries, config seeds, then subjects seen
   in the inputs (pre-filled from the vocabulary), de-duplicated
4. transform with a resolver bound to that table snapshot
5. report unmapped subjects and classes without rows (WARN + issue log)
6. write the workbook unless strict mode refuses, then persist the table
"""

__all__ = [
    "ProcessingError",
    "LoadedInput",
    "load_input",
    "build_subject_table",
    "run_single",
    "run_separate",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal run error: nothing to process or an input could not be read."""


@dataclass(frozen=True)
class LoadedInput:
    sheet: SheetGrid
    session: SessionCode | None  # forced session in dual-file mode
    family: LayoutFamily
    classes: tuple[str, ...]

    def stat(self) -> InputStat:
        return InputStat(
            file_name=self.sheet.source_name,
            sheet_name=self.sheet.sheet_name,
            session=self.session.value if self.session else "",
            layout=self.family.value,
            rows=len(self.sheet.grid),
            classes=len(self.classes),
        )


def load_input(source: Source, sheet_name: str | None, session: SessionCode | None = None) -> LoadedInput:
    try:
        sheet = read_grid(source, sheet_name)
    except (WorkbookReadError, SheetNotFoundError) as e:
        raise ProcessingError(str(e)) from e
    family = classify(sheet.grid)
    classes = tuple(extract_class_names(sheet.grid, family))
    return LoadedInput(sheet=sheet, session=session, family=family, classes=classes)


def build_subject_table(
    stored: list[SubjectMapping],
    seeds: list[SubjectMapping],
    inputs: list[LoadedInput],
    vocabulary: tuple[str, ...],
) -> list[SubjectMapping]:
    seen: list[str] = []
    for item in inputs:
        seen.extend(extract_subjects(item.sheet.grid, item.family))
    return merge_mappings(stored, seeds, catalogue_entries(seen, vocabulary))


def _find_unmapped(
    inputs: list[LoadedInput],
    table: list[SubjectMapping],
    resolver: SubjectResolver,
    vocabulary: tuple[str, ...],
) -> dict[str, LoadedInput]:
    """Raw subjects whose resolution did not land on a known canonical name."""
    known = set(vocabulary) | {e.canonical.strip() for e in table if e.is_mapped}
    out: dict[str, LoadedInput] = {}
    for item in inputs:
        for raw in extract_subjects(item.sheet.grid, item.family):
            if raw in out:
                continue
            if resolver(raw) not in known:
                out[raw] = item
    return out


def _read_inputs(requests: list[tuple[Source, str | None, SessionCode | None]]) -> list[LoadedInput]:
    inputs: list[LoadedInput] = []
    with ProgressTracker(len(requests)) as progress:
        for source, sheet_name, session in requests:
            progress.start_file(Path(source).name if not isinstance(source, (bytes, bytearray)) else "<bytes>")
            item = load_input(source, sheet_name, session)
            inputs.append(item)
            label = f" session={item.session.value}" if item.session else ""
            logger.info(
                f"{item.sheet.source_name} [{item.sheet.sheet_name}]{label}: "
                f"layout={item.family.value} rows={len(item.sheet.grid)} classes={len(item.classes)}"
            )
            progress.finish_file()
    return inputs


def _report_missing_classes(
    inputs: list[LoadedInput], rows: list[CanonicalRow], issues: IssueLogBuffer
) -> None:
    produced = {(r.class_name, r.session) for r in rows}
    produced_classes = {r.class_name for r in rows}
    for item in inputs:
        for class_name in item.classes:
            if item.session is not None:
                hit = (class_name, item.session.value) in produced
            else:
                hit = class_name in produced_classes
            if hit:
                continue
            logger.warning(f"{item.sheet.source_name}: class {class_name} produced no rows")
            issues.append(
                IssueRecord.create(
                    item.sheet.source_name, item.sheet.sheet_name, -1, CLASS_WITHOUT_ROWS,
                    f"class '{class_name}' located but no timetable rows found",
                )
            )


def _run(
    mode: str,
    requests: list[tuple[Source, str | None, SessionCode | None]],
    cfg: AppConfig,
    store: MappingStore,
    output: Path | None,
    strict: bool,
) -> ProcessingResult:
    start_time = datetime.now(UTC)
    if not requests:
        raise ProcessingError("no input workbook given")
    issues = IssueLogBuffer(cfg.issue_log_dir)
    vocabulary = cfg.vocabulary

    inputs = _read_inputs(requests)
    for item in inputs:
        if item.sheet.is_empty:
            logger.warning(f"{item.sheet.source_name} [{item.sheet.sheet_name}]: sheet is empty")
            issues.append(
                IssueRecord.create(item.sheet.source_name, item.sheet.sheet_name, -1, EMPTY_SHEET, "no cells")
            )

    table = build_subject_table(store.load(), cfg.seed_mappings(), inputs, vocabulary)
    resolver = SubjectResolver(table, vocabulary)

    if mode == "single":
        only = inputs[0]
        rows = transform_single(only.sheet.grid, resolver, vocabulary, family=only.family)
    else:
        by_session = {item.session: item.sheet.grid for item in inputs}
        rows = transform_separate(
            by_session.get(SessionCode.MORNING), by_session.get(SessionCode.AFTERNOON), resolver, vocabulary
        )

    unmapped = _find_unmapped(inputs, table, resolver, vocabulary)
    for raw, item in unmapped.items():
        issues.append(
            IssueRecord.create(
                item.sheet.source_name, item.sheet.sheet_name, -1, UNMAPPED_SUBJECT,
                f"'{raw}' has no canonical subject; written as-is",
            )
        )
    if unmapped:
        sample = ", ".join(sorted(unmapped)[:5])
        logger.warning(f"{len(unmapped)} subject(s) without a canonical name: {sample}")
    _report_missing_classes(inputs, rows, issues)

    target = output or cfg.output_file
    written = False
    try:
        if unmapped and strict:
            logger.error("strict mode: output not written while subjects are unmapped")
        else:
            write_workbook(rows, target)
            written = True
            logger.info(f"wrote {len(rows)} rows to {target}")
    finally:
        # the subject table and issue log survive a failed write
        store.save(table)
        issue_path = issues.flush()
        if issue_path is not None:
            logger.info(f"issues logged to {issue_path}")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        mode=mode,
        classes=len({r.class_name for r in rows}),
        output_rows=len(rows),
        subjects=len(table),
        unmapped=len(unmapped),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        output_path=Path(target) if written else None,
        written=written,
        inputs=[item.stat() for item in inputs],
        unmapped_subjects=sorted(unmapped),
    )


def run_single(
    source: Source,
    cfg: AppConfig,
    store: MappingStore,
    *,
    sheet_name: str | None = None,
    output: Path | None = None,
    strict: bool = False,
) -> ProcessingResult:
    """Convert one workbook carrying both sessions."""
    return _run("single", [(source, sheet_name or cfg.sheet_name, None)], cfg, store, output, strict)


def run_separate(
    morning: Source | None,
    afternoon: Source | None,
    cfg: AppConfig,
    store: MappingStore,
    *,
    morning_sheet: str | None = None,
    afternoon_sheet: str | None = None,
    output: Path | None = None,
    strict: bool = False,
) -> ProcessingResult:
    """Convert a morning and/or an afternoon workbook (at least one)."""
    requests: list[tuple[Source, str | None, SessionCode | None]] = []
    if morning is not None:
        requests.append((morning, morning_sheet or cfg.sheet_name, SessionCode.MORNING))
    if afternoon is not None:
        requests.append((afternoon, afternoon_sheet or cfg.sheet_name, SessionCode.AFTERNOON))
    return _run("separate", requests, cfg, store, output, strict)
