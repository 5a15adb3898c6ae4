from __future__ import annotations

import re
import unicodedata

"""Text normalization used for every fuzzy comparison in the engine.

Only comparison keys go through here; values written to the output keep their
original casing and diacritics.
"""

__all__ = [
    "normalize_text",
    "normalize_key",
]

_WHITESPACE = re.compile(r"\s+")
# đ/Đ carry a stroke, not a combining mark, so NFD leaves them intact
_STROKE_FOLD = str.maketrans({"đ": "d", "Đ": "D"})


def normalize_text(value: object) -> str:
    """Strip diacritics, lowercase and collapse whitespace.

    Unlike a plain NFD strip, đ/Đ are folded to d, so "Địa" and "Dia" compare equal.

    >>> normalize_text("  Thứ   Hai ")
    'thu hai'
    >>> normalize_text("ĐỊA LÍ")
    'dia li'
    """
    if value is None:
        return ""
    text = str(value).translate(_STROKE_FOLD)
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped.lower()).strip()


def normalize_key(value: object) -> str:
    """normalize_text, with punctuation and symbols turned into spaces.

    Mapping-table keys use this so that "Toán (TC)" and "toan tc" collide.
    """
    text = normalize_text(value)
    if not text:
        return ""
    cleaned = "".join(ch if ch.isalnum() or ch.isspace() else " " for ch in text)
    return _WHITESPACE.sub(" ", cleaned).strip()
