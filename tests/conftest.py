# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from tkb_vnedu.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for var in ("TKB_OUTPUT_FILE", "TKB_MAPPING_STORE"):
            monkeypatch.delenv(var, raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """output_file: ./out/TKB_vnedu.xlsx
mapping_store: ./config/subject_mappings.json
issue_log_dir: ./logs
extra_subjects:
  - LỊCH SỬ
subject_mappings:
  "Sinh hoạt lớp": "HĐ TẬP THỂ"
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "tkb.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _write_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook():
    """Write {sheet: rows} to an .xlsx file without header or index."""
    return _write_workbook


@pytest.fixture()
def grid_layout_rows() -> list[list[object]]:
    """Whole-day GRID sheet: 10A1 and 10A2, each with a morning and an afternoon column."""
    return [
        ["THỜI KHÓA BIỂU HỌC KỲ I", "", "", "", "", ""],
        ["Áp dụng từ 05/09", "", "", "", "", ""],
        ["Ngày", "Tiết", "10A1", "", "10A2", ""],
        ["", "", "Sáng", "Chiều", "S", "C"],
        ["Thứ 2", 1, "Chào cờ", "Tin học", "Toán", "Văn"],
        ["", 2, "Toán", "Tin học", "Lý", ""],
        ["Thứ 3", 1, "Văn", "Anh", "Hóa", "Sử"],
        ["", 2, "Địa lí", "", "Toán", "Sinh"],
    ]


@pytest.fixture()
def row_wise_rows() -> list[list[object]]:
    return [
        ["Lớp", "Buổi", "Tiết", "Thứ 2", "Thứ 3", "Thứ 4", "Thứ 5", "Thứ 6", "Thứ 7", "CN"],
        ["10A2", "Sáng", 2, "Lý", "Hóa", "", "", "", "", ""],
        ["10A1", "S", 2, "Văn", "Toán", "", "", "", "", ""],
        ["10A1", "S", 1, "Toán", "Văn", "", "", "", "", ""],
        ["10A1", "C", 1, "Tin học", "", "", "", "", "", ""],
    ]


@pytest.fixture()
def class_header_rows() -> list[list[object]]:
    """CLASS_HEADER sheet: class codes across row 1, day label rows, period rows."""
    return [
        ["TKB BUỔI CHIỀU", "", "", "", ""],
        ["Buổi", "Tiết", "10A1", "10A2", "10A3"],
        ["Thứ 2", "", "", "", ""],
        ["Chiều", 1, "Toán", "Văn", "Anh"],
        ["Chiều", 2, "Lý", "", "Hóa"],
        ["Thứ 3", "", "", "", ""],
        ["Chiều", 1, "Sinh", "Sử", "Địa lí"],
    ]
