from __future__ import annotations

import pytest

from kisanpath.cache import LanguageSlotCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache = LanguageSlotCache(ttl_seconds=30, clock=clock)
    cache.set("Lessons", frozenset({"title_en"}))

    clock.now = 29
    assert cache.get("lessons") == frozenset({"title_en"})
    clock.now = 31
    assert cache.get("lessons") is None


def test_zero_ttl_disables_caching() -> None:
    cache = LanguageSlotCache(ttl_seconds=0)
    cache.set("lessons", frozenset({"title_en"}))
    assert cache.get("lessons") is None


def test_invalidate_and_clear() -> None:
    cache = LanguageSlotCache()
    cache.set("lessons", frozenset({"title_en"}))
    cache.set("other", frozenset({"id"}))

    cache.invalidate("lessons")
    assert cache.get("lessons") is None
    assert cache.get("other") == frozenset({"id"})

    cache.clear()
    assert cache.get("other") is None


def test_blank_table_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        LanguageSlotCache().get("  ")
