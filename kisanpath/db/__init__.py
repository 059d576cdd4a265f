"""Database utilities for the KisanPath lesson store."""

from .session import (
    STORE_ERRORS,
    SessionScope,
    StoreNotConfigured,
    dispose_engine,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "STORE_ERRORS",
    "SessionScope",
    "StoreNotConfigured",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
