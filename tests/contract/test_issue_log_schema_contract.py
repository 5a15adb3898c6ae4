from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from jsonschema.exceptions import ValidationError

from tkb_vnedu.config.loader import AppConfig
from tkb_vnedu.models.issue_record import IssueRecord
from tkb_vnedu.services.orchestrator import run_single
from tkb_vnedu.storage.mapping_store import InMemoryMappingStore

"""Issue log JSON Lines contract: every line is one record matching the schema."""

SCHEMA_PATH = Path(__file__).with_name("issue_log_schema.json")


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_issue_record_matches_schema(schema):
    rec = IssueRecord.create("sang.xlsx", "TKB", -1, "UNMAPPED_SUBJECT", "'Lý' has no canonical subject")
    jsonschema.validate(json.loads(rec.to_json_line()), schema)


def test_schema_rejects_extra_key(schema):
    record = {
        "timestamp": "2024-09-05T07:00:00Z",
        "file": "sang.xlsx",
        "sheet": "TKB",
        "row": -1,
        "issue_type": "EMPTY_SHEET",
        "message": "no cells",
        "db_message": "not allowed",
    }
    with pytest.raises(ValidationError):
        jsonschema.validate(record, schema)


def test_run_issue_log_lines_match_schema(schema, temp_workdir: Path, grid_layout_rows, make_workbook):
    source = make_workbook(temp_workdir / "data" / "tkb.xlsx", {"TKB": grid_layout_rows, "Trống": []})
    cfg = AppConfig(output_file=temp_workdir / "out.xlsx", issue_log_dir=temp_workdir / "logs")

    run_single(source, cfg, InMemoryMappingStore())

    lines = [
        line
        for path in (temp_workdir / "logs").glob("issues-*.log")
        for line in path.read_text(encoding="utf-8").splitlines()
    ]
    assert lines
    for line in lines:
        jsonschema.validate(json.loads(line), schema)
