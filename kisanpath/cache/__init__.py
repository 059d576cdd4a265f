"""In-memory caches shared across backend services."""

from .slot_cache import LanguageSlotCache

__all__ = ["LanguageSlotCache"]
