"""Process-local cache of which language slots exist on a table."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, FrozenSet, Optional


def _normalize_table(table: str) -> str:
    normalized = table.strip().lower()
    if not normalized:
        raise ValueError("Table name cannot be empty when caching language slots.")
    return normalized


@dataclass
class _SlotEntry:
    columns: FrozenSet[str]
    cached_at: float


class LanguageSlotCache:
    """Remembers discovered column names per table for ``ttl_seconds``.

    A ttl of zero or less disables caching entirely.
    """

    def __init__(self, ttl_seconds: float = 300.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, _SlotEntry] = {}
        self._lock = Lock()

    def get(self, table: str) -> Optional[FrozenSet[str]]:
        key = _normalize_table(table)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._ttl <= 0 or self._clock() - entry.cached_at > self._ttl:
                self._entries.pop(key, None)
                return None
            return entry.columns

    def set(self, table: str, columns: FrozenSet[str]) -> None:
        if self._ttl <= 0:
            return
        key = _normalize_table(table)
        with self._lock:
            self._entries[key] = _SlotEntry(columns=frozenset(columns), cached_at=self._clock())

    def invalidate(self, table: str) -> None:
        key = _normalize_table(table)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


__all__ = ["LanguageSlotCache"]
