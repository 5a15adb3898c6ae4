from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from tkb_vnedu.config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, default_config, load_config
from tkb_vnedu.engine.classifier import classify, find_header_row
from tkb_vnedu.engine.locators import extract_class_names
from tkb_vnedu.excel.reader import SheetNotFoundError, WorkbookReadError, list_sheet_names, read_workbook
from tkb_vnedu.excel.writer import OutputWriteError
from tkb_vnedu.logging.init import log_summary, setup_logging
from tkb_vnedu.models.grid import cell_text
from tkb_vnedu.services.orchestrator import ProcessingError, run_separate, run_single
from tkb_vnedu.services.subjects import apply_edits, remove_mapping, unmapped
from tkb_vnedu.services.summary import render_summary_line
from tkb_vnedu.storage.mapping_store import JsonMappingStore, MappingStoreError

"""CLI entrypoint.

Subcommands:
- convert: one whole-day workbook, or --morning/--afternoon workbooks
- inspect: print layout, header row, classes and first rows of each sheet
- mappings: list / set / remove entries of the persisted subject table

Config comes from --config, else config/tkb.yml when present, else defaults;
.env is loaded first (override mode) so TKB_* variables win over the file.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_UNMAPPED = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tkb-vnedu",
        description="Normalize school timetables (TKB) into the VNEDU import sheet",
    )
    p.add_argument("--config", type=Path, default=None, help="YAML config (default: config/tkb.yml if present)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="Convert timetable workbook(s)")
    conv.add_argument("file", nargs="?", type=Path, help="Whole-day workbook (single-file mode)")
    conv.add_argument("--sheet", default=None, help="Sheet of the whole-day workbook")
    conv.add_argument("--morning", type=Path, default=None, help="Morning workbook (buổi sáng)")
    conv.add_argument("--afternoon", type=Path, default=None, help="Afternoon workbook (buổi chiều)")
    conv.add_argument("--morning-sheet", default=None)
    conv.add_argument("--afternoon-sheet", default=None)
    conv.add_argument("--output", type=Path, default=None, help="Output .xlsx (overrides config)")
    conv.add_argument("--strict", action="store_true", help="Do not write output while subjects are unmapped")

    insp = sub.add_parser("inspect", help="Show detected layout of each sheet, then exit")
    insp.add_argument("file", type=Path)
    insp.add_argument("--sheet", default=None)
    insp.add_argument("--rows", type=int, default=8, help="Number of leading rows to print")

    maps = sub.add_parser("mappings", help="Edit the persisted subject mapping table")
    maps_sub = maps.add_subparsers(dest="action", required=True)
    maps_sub.add_parser("list")
    m_set = maps_sub.add_parser("set")
    m_set.add_argument("raw")
    m_set.add_argument("canonical")
    m_rm = maps_sub.add_parser("remove")
    m_rm.add_argument("raw")

    return p.parse_args(argv)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; .env values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _resolve_config(path: Path | None) -> AppConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _inspect(args: argparse.Namespace) -> int:
    try:
        names = list_sheet_names(args.file)
        if args.sheet and args.sheet not in names:
            print(f"inspect: sheet not found: {args.sheet} (available: {names})")
            return EXIT_FATAL
        sheets = read_workbook(args.file, target_sheets=[args.sheet] if args.sheet else None)
    except WorkbookReadError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {args.file.name}")
    for name, grid in sheets.items():
        family = classify(grid)
        print(
            f"  SHEET: {name} layout={family.value} rows={len(grid)} "
            f"header_row={find_header_row(grid)} classes={extract_class_names(grid, family)}"
        )
        for row in grid[: args.rows]:
            print("    ", [cell_text(c) for c in row])
    return EXIT_SUCCESS


def _mappings(args: argparse.Namespace, cfg: AppConfig, logger) -> int:
    store = JsonMappingStore(cfg.mapping_store)
    table = store.load()
    if args.action == "list":
        for entry in table:
            marker = " [custom]" if entry.is_user_defined else ""
            print(f"{entry.raw} -> {entry.canonical}{marker}")
        logger.info(f"{len(table)} mapping(s) in {cfg.mapping_store}")
        blank = unmapped(table)
        if blank:
            logger.warning(f"{len(blank)} entry(ies) still without a canonical name: {', '.join(e.raw for e in blank)}")
        return EXIT_SUCCESS
    if args.action == "set":
        if not args.raw.strip() or not args.canonical.strip():
            logger.error("mappings: raw and canonical must both be non-blank")
            return EXIT_FATAL
        table = apply_edits(table, {args.raw: args.canonical})
    else:
        before = len(table)
        table = remove_mapping(table, args.raw)
        if len(table) == before:
            logger.warning(f"mappings: no entry for '{args.raw}'")
    try:
        store.save(table)
    except MappingStoreError as e:
        logger.error(f"mappings: {e}")
        return EXIT_FATAL
    logger.info(f"saved {len(table)} mapping(s) to {cfg.mapping_store}")
    return EXIT_SUCCESS


def _convert(args: argparse.Namespace, cfg: AppConfig, logger) -> int:
    dual = args.morning is not None or args.afternoon is not None
    if args.file is not None and dual:
        logger.error("convert: give either FILE or --morning/--afternoon, not both")
        return EXIT_FATAL
    if args.file is None and not dual:
        logger.error("convert: no input workbook given")
        return EXIT_FATAL

    store = JsonMappingStore(cfg.mapping_store)
    try:
        if dual:
            result = run_separate(
                args.morning,
                args.afternoon,
                cfg,
                store,
                morning_sheet=args.morning_sheet,
                afternoon_sheet=args.afternoon_sheet,
                output=args.output,
                strict=args.strict,
            )
        else:
            result = run_single(args.file, cfg, store, sheet_name=args.sheet, output=args.output, strict=args.strict)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except (SheetNotFoundError, WorkbookReadError, MappingStoreError) as e:
        logger.error(f"io: {e}")
        return EXIT_FATAL
    except OutputWriteError as e:
        logger.error(f"output: {e}")
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.unmapped and args.strict:
        return EXIT_UNMAPPED
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        return _inspect(args)
    if args.command == "mappings":
        return _mappings(args, cfg, logger)
    return _convert(args, cfg, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
