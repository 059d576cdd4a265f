"""Telemetry listener that keeps an audit trail of completion attempts."""

from __future__ import annotations

import logging
from typing import Set

from .db.session import session_scope
from .repositories.audit_events import audit_events
from .telemetry import TelemetryEvent, register_listener

logger = logging.getLogger(__name__)

AUDITED_EVENTS: Set[str] = {
    "lesson_completion_recorded",
    "lesson_completion_failed",
}


def persist_event(event: TelemetryEvent) -> None:
    if event.name not in AUDITED_EVENTS:
        return
    user_id = event.payload.get("user_id")
    if not isinstance(user_id, str) or not user_id.strip():
        return
    try:
        with session_scope() as session:
            audit_events.record(session, user_id, event.name, dict(event.payload))
    except Exception:  # noqa: BLE001
        logger.exception("Failed to persist %s for user_id=%s", event.name, user_id)


def install() -> None:
    register_listener(persist_event)


__all__ = ["AUDITED_EVENTS", "install", "persist_event"]
