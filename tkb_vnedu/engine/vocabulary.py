from __future__ import annotations

from collections.abc import Iterable

from .normalize import normalize_text

"""Controlled vocabulary of VNEDU subject names ("Tên môn học Edu").

The list order matters: auto_map returns the first containment hit, so more
specific names must not be shadowed by shorter ones placed earlier.
"""

__all__ = [
    "EDU_SUBJECTS",
    "build_vocabulary",
    "auto_map",
]

_RAW_SUBJECTS = [
    "TOÁN",
    "TOÁN HỌC",
    "VẬT LÍ",
    "SINH HỌC",
    "NGỮ VĂN",
    "ĐỊA LÍ",
    "TIẾNG ANH",
    "GDCD",
    "THỂ DỤC",
    "HÓA HỌC",
    "GDQP",
    "HỌC NGHỀ",
    "NGHỀ PT",
    "LỊCH SỬ VÀ ĐỊA LÍ",
    "KHOA HỌC TỰ NHIÊN",
    "TIN HỌC",
    "GIÁO DỤC THỂ CHẤT",
    "KTCN",
    "NGHỆ THUẬT",
    "HOẠT ĐỘNG TRẢI NGHIỆM, HƯỚNG NGHIỆP",
    "NỘI DUNG GIÁO DỤC CỦA ĐỊA PHƯƠNG",
    "TIẾNG VIỆT",
    "TN-XH",
    "ĐẠO ĐỨC",
    "THỦ CÔNG",
    "KHOA HỌC",
    "KĨ THUẬT",
    "KĨ NĂNG SỐNG",
    "HOẠT ĐỘNG TRẢI NGHIỆM",
    "TIN HỌC VÀ CÔNG NGHỆ (CÔNG NGHỆ)",
    "TIN HỌC VÀ CÔNG NGHỆ (TIN HỌC)",
    "NGOẠI NGỮ 1",
    "TC nhận xét 1",
    "TC nhận xét 2",
    "TC nhận xét 3",
    "TIẾT ĐỌC THƯ VIỆN",
    "TC NHẬN XÉT 2",
    "HĐ TẬP THỂ",
    "CÔNG NGHỆ",
    "ÂM NHẠC",
    "MĨ THUẬT",
    "TỰ CHỌN 2",
    "TỰ CHỌN 3",
    "TC NHẬN XÉT 3",
    "TỰ CHỌN 1",
    "TỰ CHỌN 5",
]


def build_vocabulary(extra: Iterable[str] | None = None, base: Iterable[str] = _RAW_SUBJECTS) -> tuple[str, ...]:
    """Return base + extra as an immutable tuple, exact duplicates dropped."""
    seen: set[str] = set()
    out: list[str] = []
    for name in list(base) + list(extra or []):
        name = str(name).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        out.append(name)
    return tuple(out)


EDU_SUBJECTS: tuple[str, ...] = build_vocabulary()


def auto_map(raw: str, vocabulary: Iterable[str] = EDU_SUBJECTS) -> str:
    """Map raw text onto the vocabulary without any user table.

    Exact normalized match first, then the first entry (in list order) where
    either string contains the other. "" when nothing matches.
    """
    needle = normalize_text(raw)
    if not needle:
        return ""
    entries = [(name, normalize_text(name)) for name in vocabulary]
    for name, key in entries:
        if key == needle:
            return name
    for name, key in entries:
        if key and (key in needle or needle in key):
            return name
    return ""
