from __future__ import annotations

from tkb_vnedu.engine.vocabulary import EDU_SUBJECTS, auto_map, build_vocabulary


def test_default_vocabulary_has_no_duplicates():
    assert len(EDU_SUBJECTS) == len(set(EDU_SUBJECTS))
    assert "TOÁN" in EDU_SUBJECTS
    assert "HĐ TẬP THỂ" in EDU_SUBJECTS


def test_build_vocabulary_appends_extra_in_order():
    vocab = build_vocabulary(["LỊCH SỬ", " ", "TOÁN", "GDĐP"])
    assert vocab[: len(EDU_SUBJECTS)] == EDU_SUBJECTS
    assert vocab[len(EDU_SUBJECTS):] == ("LỊCH SỬ", "GDĐP")


def test_build_vocabulary_custom_base():
    assert build_vocabulary(["b"], base=["a", "b"]) == ("a", "b")


def test_auto_map_exact_before_containment():
    # "toan hoc" contains "toan", but the exact key wins
    assert auto_map("Toán học") == "TOÁN HỌC"
    assert auto_map("toan") == "TOÁN"


def test_auto_map_containment_in_list_order():
    assert auto_map("Tiếng Anh 10") == "TIẾNG ANH"
    assert auto_map("Công nghệ", ["CÔNG NGHỆ", "KTCN"]) == "CÔNG NGHỆ"


def test_auto_map_no_match():
    assert auto_map("Chào cờ") == ""
    assert auto_map("") == ""
    assert auto_map("Toán", []) == ""
