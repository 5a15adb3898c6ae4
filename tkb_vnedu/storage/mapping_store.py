from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from ..models.subject_mapping import SubjectMapping

"""Persistence port for the user-edited subject mapping table.

The engine never touches this: the orchestrator loads a snapshot before a run
and saves the table afterwards. Only entries with both a raw text and a
canonical name are written.

File format is a JSON list of {"raw", "edu", "custom"} objects.
"""

__all__ = [
    "MappingStoreError",
    "MappingStore",
    "JsonMappingStore",
    "InMemoryMappingStore",
    "persistable",
]

logger = logging.getLogger(__name__)


class MappingStoreError(Exception):
    """Raised when the mapping table cannot be written."""


class MappingStore(Protocol):
    def load(self) -> list[SubjectMapping]: ...

    def save(self, entries: Iterable[SubjectMapping]) -> None: ...


def persistable(entries: Iterable[SubjectMapping]) -> list[SubjectMapping]:
    return [e for e in entries if e.raw.strip() and e.canonical.strip()]


class JsonMappingStore:
    """Mapping table kept in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[SubjectMapping]:
        # unreadable state is not fatal: the run continues with an empty table
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"mapping store unreadable, starting empty: {self.path} ({e})")
            return []
        if not isinstance(data, list):
            logger.warning(f"mapping store is not a list, starting empty: {self.path}")
            return []
        entries = [SubjectMapping.from_dict(item) for item in data if isinstance(item, dict)]
        logger.debug(f"loaded {len(entries)} subject mappings from {self.path}")
        return entries

    def save(self, entries: Iterable[SubjectMapping]) -> None:
        payload = [e.to_dict() for e in persistable(entries)]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise MappingStoreError(f"cannot write mapping store {self.path}: {e}") from e
        logger.debug(f"saved {len(payload)} subject mappings to {self.path}")


class InMemoryMappingStore:
    def __init__(self, entries: Iterable[SubjectMapping] = ()) -> None:
        self._entries = list(entries)

    def load(self) -> list[SubjectMapping]:
        return list(self._entries)

    def save(self, entries: Iterable[SubjectMapping]) -> None:
        self._entries = persistable(entries)
