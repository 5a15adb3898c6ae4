from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.subject_mapping import SubjectMapping
from .normalize import normalize_key, normalize_text
from .vocabulary import EDU_SUBJECTS, auto_map

"""Subject resolver: raw cell text -> canonical subject name.

Resolution order:
1. empty after normalization -> ""
2. exact key match in the mapping table (entry must have a canonical name)
3. containment match in the table, longest key wins, ties by table order
4. controlled vocabulary (auto_map)
5. the raw text unchanged, so nothing is silently dropped

The table is read as a snapshot. Newly seen subjects are persisted by the
orchestrator, never here.
"""

__all__ = [
    "MIN_PARTIAL_KEY_LENGTH",
    "resolve",
    "SubjectResolver",
]

MIN_PARTIAL_KEY_LENGTH = 3


def _candidates(table: Iterable[SubjectMapping]) -> tuple[tuple[str, str], ...]:
    out = []
    for entry in table:
        key = normalize_key(entry.raw)
        if key:
            out.append((key, entry.canonical.strip()))
    return tuple(out)


def _resolve_with(
    raw: str,
    candidates: Sequence[tuple[str, str]],
    vocabulary: Sequence[str],
) -> str:
    raw = "" if raw is None else str(raw)
    if not normalize_text(raw):
        return ""
    key = normalize_key(raw)
    if not key:
        # punctuation only: nothing to look up in the table
        return auto_map(raw, vocabulary) or raw

    for cand_key, canonical in candidates:
        if canonical and cand_key == key:
            return canonical

    best: tuple[str, str] | None = None
    for cand_key, canonical in candidates:
        if not canonical or len(cand_key) < MIN_PARTIAL_KEY_LENGTH:
            continue
        if cand_key in key or key in cand_key:
            # strictly longer only, so the earlier entry keeps a tie
            if best is None or len(cand_key) > len(best[0]):
                best = (cand_key, canonical)
    if best is not None:
        return best[1]

    return auto_map(raw, vocabulary) or raw


def resolve(
    raw: str,
    table: Iterable[SubjectMapping] = (),
    vocabulary: Sequence[str] = EDU_SUBJECTS,
) -> str:
    """Resolve one raw subject against a mapping table and the vocabulary."""
    return _resolve_with(raw, _candidates(table), vocabulary)


class SubjectResolver:
    """Resolver bound to one table snapshot, memoizing per distinct raw text.

    A transform run builds one of these so that a sheet with hundreds of
    "Toán" cells normalizes the table once and resolves "Toán" once.
    """

    def __init__(
        self,
        table: Iterable[SubjectMapping] = (),
        vocabulary: Sequence[str] = EDU_SUBJECTS,
    ) -> None:
        self.table: tuple[SubjectMapping, ...] = tuple(table)
        self.vocabulary: tuple[str, ...] = tuple(vocabulary)
        self._candidates = _candidates(self.table)
        self._memo: dict[str, str] = {}

    def __call__(self, raw: str) -> str:
        raw = "" if raw is None else str(raw)
        hit = self._memo.get(raw)
        if hit is None:
            hit = _resolve_with(raw, self._candidates, self.vocabulary)
            self._memo[raw] = hit
        return hit

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._memo)
