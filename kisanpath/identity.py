"""Caller identity as handed over by the authentication proxy."""

from __future__ import annotations

from typing import Optional

from fastapi import Header

USER_ID_HEADER = "X-User-Id"


def normalize_user_id(user_id: Optional[str]) -> Optional[str]:
    """Trimmed user id, or ``None`` when there is no usable identity (guest)."""
    if user_id is None:
        return None
    return user_id.strip() or None


def current_user_id(x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER)) -> Optional[str]:
    """Return the authenticated user id, or ``None`` for a guest session."""
    return normalize_user_id(x_user_id)


__all__ = ["USER_ID_HEADER", "current_user_id", "normalize_user_id"]
