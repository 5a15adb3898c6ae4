from __future__ import annotations

import json
from pathlib import Path

import pytest

from tkb_vnedu.config.loader import AppConfig
from tkb_vnedu.excel.reader import read_grid
from tkb_vnedu.excel.writer import SHEET_NAME, OutputWriteError
from tkb_vnedu.models.subject_mapping import SubjectMapping
from tkb_vnedu.services.orchestrator import ProcessingError, run_single
from tkb_vnedu.storage.mapping_store import InMemoryMappingStore, JsonMappingStore

"""End-to-end single-file runs against real .xlsx files (pandas + openpyxl)."""


@pytest.fixture()
def cfg(temp_workdir: Path) -> AppConfig:
    return AppConfig(
        output_file=temp_workdir / "out" / "TKB_vnedu.xlsx",
        mapping_store=temp_workdir / "config" / "subject_mappings.json",
        issue_log_dir=temp_workdir / "logs",
    )


def _issues(log_dir: Path) -> list[dict]:
    records = []
    for path in sorted(log_dir.glob("issues-*.log")):
        records.extend(json.loads(line) for line in path.read_text(encoding="utf-8").splitlines())
    return records


def test_grid_workbook(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})
    store = InMemoryMappingStore()

    result = run_single(source, cfg, store)

    assert result.mode == "single"
    assert result.written is True
    assert result.output_path == cfg.output_file
    assert (result.classes, result.output_rows) == (2, 8)
    assert result.unmapped_subjects == ["Chào cờ", "Lý"]
    assert [s.layout for s in result.inputs] == ["grid"]

    out = read_grid(cfg.output_file, SHEET_NAME).grid
    assert out[0][:4] == ["Lớp học", "Buổi", "Tiết thứ", "Thứ 2"]
    assert out[1][:5] == ["10A1", "S", 1, "Chào cờ", "NGỮ VĂN"]
    assert [row[:3] for row in out[1:5]] == [["10A1", "S", 1], ["10A1", "S", 2], ["10A1", "C", 1], ["10A1", "C", 2]]

    # the store keeps every resolved subject, but not the unresolved ones
    saved = {e.raw: e.canonical for e in store.load()}
    assert saved["Văn"] == "NGỮ VĂN"
    assert "Chào cờ" not in saved

    issue_types = [r["issue_type"] for r in _issues(cfg.issue_log_dir)]
    assert issue_types == ["UNMAPPED_SUBJECT", "UNMAPPED_SUBJECT"]


def test_stored_mapping_wins_over_vocabulary(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})
    store = InMemoryMappingStore([
        SubjectMapping("Văn", "TIẾNG VIỆT", True),
        SubjectMapping("Chào cờ", "HĐ TẬP THỂ", True),
        SubjectMapping("Lý", "VẬT LÍ", True),
    ])

    result = run_single(source, cfg, store, strict=True)

    assert result.unmapped == 0 and result.written
    out = read_grid(cfg.output_file, SHEET_NAME).grid
    assert out[1][3:5] == ["HĐ TẬP THỂ", "TIẾNG VIỆT"]
    assert not list(cfg.issue_log_dir.glob("issues-*.log"))


def test_row_wise_workbook_keeps_sheet_sessions(cfg: AppConfig, temp_workdir: Path, row_wise_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "rw.xlsx", {"Sheet1": row_wise_rows})

    result = run_single(source, cfg, InMemoryMappingStore())

    out = read_grid(cfg.output_file, SHEET_NAME).grid
    assert [row[:3] for row in out[1:]] == [["10A1", "C", 1], ["10A1", "S", 1], ["10A1", "S", 2], ["10A2", "S", 2]]
    assert result.inputs[0].layout == "row_wise"


def test_strict_mode_writes_nothing(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})
    store = JsonMappingStore(cfg.mapping_store)

    result = run_single(source, cfg, store, strict=True)

    assert result.written is False
    assert result.output_path is None
    assert not cfg.output_file.exists()
    # the table is persisted regardless, so the user can fill the gaps
    assert cfg.mapping_store.exists()


def test_named_sheet_and_output_override(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, row_wise_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "two.xlsx", {"A": row_wise_rows, "B": grid_layout_rows})
    target = temp_workdir / "custom.xlsx"

    result = run_single(source, cfg, InMemoryMappingStore(), sheet_name="B", output=target)

    assert result.inputs[0].sheet_name == "B"
    assert result.output_path == target and target.exists()


def test_empty_sheet_is_reported(cfg: AppConfig, temp_workdir: Path, make_workbook):
    source = make_workbook(temp_workdir / "data" / "empty.xlsx", {"Trống": []})

    result = run_single(source, cfg, InMemoryMappingStore())

    assert result.output_rows == 0 and result.written
    assert read_grid(cfg.output_file, SHEET_NAME).grid[0][0] == "Lớp học"
    assert [r["issue_type"] for r in _issues(cfg.issue_log_dir)] == ["EMPTY_SHEET"]


def test_bytes_source(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, make_workbook):
    path = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})

    result = run_single(path.read_bytes(), cfg, InMemoryMappingStore())

    assert result.inputs[0].file_name == "<bytes>"
    assert result.output_rows == 8


def test_unreadable_source(cfg: AppConfig, temp_workdir: Path):
    with pytest.raises(ProcessingError, match="file not found"):
        run_single(temp_workdir / "missing.xlsx", cfg, InMemoryMappingStore())


def test_failed_write_still_persists_table_and_issues(cfg: AppConfig, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})
    blocked = temp_workdir / "out" / "locked.xlsx"
    blocked.mkdir(parents=True)

    with pytest.raises(OutputWriteError):
        run_single(source, cfg, JsonMappingStore(cfg.mapping_store), output=blocked)

    assert cfg.mapping_store.exists()
    assert "UNMAPPED_SUBJECT" in [r["issue_type"] for r in _issues(cfg.issue_log_dir)]
