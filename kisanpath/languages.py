"""Language tags understood by the lesson engine."""

from __future__ import annotations

import re
from typing import Dict, Optional

DEFAULT_LANGUAGE = "en"

# Display names as shown on the client's language picker.
SUPPORTED_LANGUAGES: Dict[str, str] = {
    "hi": "हिन्दी/HINDI",
    "en": "ENGLISH",
    "ml": "മലയാളം/MALAYALAM",
    "ta": "தமிழ்/TAMIL",
    "kn": "ಕನ್ನಡ/KANNADA",
    "te": "తెలుగు/TELUGU",
    "pa": "ਪੰਜਾਬੀ/PUNJABI",
    "kok": "कोंकणी/KONKANI",
    "mr": "मराठी/MARATHI",
}

_LANGUAGE_TAG = re.compile(r"^[a-z]{2,3}$")


def normalize_language_code(code: Optional[str]) -> str:
    """Return a lowercase language tag, or the default for blank input.

    Tags that are well formed but unknown pass through unchanged; the
    resolver degrades to the default language for those. Anything else
    raises ``ValueError`` because tags end up addressing storage slots.
    """
    if code is None:
        return DEFAULT_LANGUAGE
    normalized = code.strip().lower()
    if not normalized:
        return DEFAULT_LANGUAGE
    if not _LANGUAGE_TAG.match(normalized):
        raise ValueError(f"Unsupported language tag: {code!r}")
    return normalized


def is_supported(code: str) -> bool:
    return code in SUPPORTED_LANGUAGES


__all__ = [
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "is_supported",
    "normalize_language_code",
]
