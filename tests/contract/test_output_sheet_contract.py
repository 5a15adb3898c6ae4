from __future__ import annotations

from pathlib import Path

from openpyxl import load_workbook

from tkb_vnedu.cli import main as cli_main

"""Output workbook contract: one TKB_VNEDU sheet, fixed 10-column header."""

EXPECTED_HEADER = ["Lớp học", "Buổi", "Tiết thứ", "Thứ 2", "Thứ 3", "Thứ 4", "Thứ 5", "Thứ 6", "Thứ 7", "Chủ nhật"]


def test_output_sheet_and_header(write_config, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows})
    assert cli_main(["convert", str(source)]) == 0

    wb = load_workbook(temp_workdir / "out" / "TKB_vnedu.xlsx")
    assert wb.sheetnames == ["TKB_VNEDU"]
    rows = list(wb["TKB_VNEDU"].iter_rows(values_only=True))
    assert list(rows[0]) == EXPECTED_HEADER
    for row in rows[1:]:
        assert len(row) == 10
        assert row[1] in ("S", "C", "")
        assert isinstance(row[2], int) and row[2] >= 1
