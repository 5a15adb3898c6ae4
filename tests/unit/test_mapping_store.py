from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tkb_vnedu.models.subject_mapping import SubjectMapping
from tkb_vnedu.storage.mapping_store import (
    InMemoryMappingStore,
    JsonMappingStore,
    MappingStoreError,
    persistable,
)


def test_missing_file_loads_empty(tmp_path: Path):
    assert JsonMappingStore(tmp_path / "none.json").load() == []


def test_save_then_load(tmp_path: Path):
    store = JsonMappingStore(tmp_path / "nested" / "map.json")
    store.save([
        SubjectMapping("Chào cờ", "HĐ TẬP THỂ", True),
        SubjectMapping("Toán", "TOÁN"),
        SubjectMapping("Lý", ""),
    ])
    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == [
        {"raw": "Chào cờ", "edu": "HĐ TẬP THỂ", "custom": True},
        {"raw": "Toán", "edu": "TOÁN", "custom": False},
    ]
    assert store.load() == [SubjectMapping("Chào cờ", "HĐ TẬP THỂ", True), SubjectMapping("Toán", "TOÁN")]
    assert not (tmp_path / "nested" / "map.json.tmp").exists()


def test_corrupt_file_warns_and_loads_empty(tmp_path: Path, caplog):
    path = tmp_path / "map.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert JsonMappingStore(path).load() == []
    assert "unreadable" in caplog.text


def test_non_list_payload_loads_empty(tmp_path: Path):
    path = tmp_path / "map.json"
    path.write_text('{"raw": "Toán"}', encoding="utf-8")
    assert JsonMappingStore(path).load() == []


def test_legacy_field_names(tmp_path: Path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps([{"raw": "Văn", "canonical": "NGỮ VĂN"}, "junk"]), encoding="utf-8")
    assert JsonMappingStore(path).load() == [SubjectMapping("Văn", "NGỮ VĂN")]


def test_save_failure_raises(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonMappingStore(blocker / "map.json")
    with pytest.raises(MappingStoreError):
        store.save([SubjectMapping("Toán", "TOÁN")])


def test_in_memory_store_keeps_only_persistable():
    store = InMemoryMappingStore([SubjectMapping("Toán", "TOÁN")])
    store.save([SubjectMapping("Lý", ""), SubjectMapping("Văn", "NGỮ VĂN")])
    assert store.load() == [SubjectMapping("Văn", "NGỮ VĂN")]


def test_persistable_drops_blank_raw():
    assert persistable([SubjectMapping(" ", "TOÁN"), SubjectMapping("Toán", "TOÁN")]) == [SubjectMapping("Toán", "TOÁN")]
