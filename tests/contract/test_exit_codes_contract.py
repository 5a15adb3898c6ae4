from __future__ import annotations

from pathlib import Path

from tkb_vnedu.cli import main as cli_main

"""Exit code contract: 0 success, 1 fatal, 2 unmapped subjects under --strict."""


def test_exit_code_fatal_on_bad_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "tkb.yml").write_text("output_file: 3\n", encoding="utf-8")
    assert cli_main(["convert", "x.xlsx"]) == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_on_unreadable_input(write_config, temp_workdir: Path, capsys):
    bad = temp_workdir / "data" / "bad.xlsx"
    bad.write_bytes(b"PK\x03\x04 broken")
    assert cli_main(["convert", str(bad)]) == 1
    assert "ERROR processing:" in capsys.readouterr().out


def test_exit_code_success(write_config, temp_workdir: Path, row_wise_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "rw.xlsx", {"TKB": row_wise_rows})
    # unmapped subjects without --strict are only warnings
    assert cli_main(["convert", str(source)]) == 0


def test_exit_code_unmapped_strict(write_config, temp_workdir: Path, row_wise_rows, make_workbook, capsys):
    source = make_workbook(temp_workdir / "data" / "rw.xlsx", {"TKB": row_wise_rows})
    assert cli_main(["convert", str(source), "--strict"]) == 2
    assert "WARN 1 subject(s) without a canonical name: Lý" in capsys.readouterr().out
