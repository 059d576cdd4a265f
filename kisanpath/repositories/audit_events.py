"""Append-only audit trail fed by the telemetry pipeline."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.models import AuditEventModel, ProfileModel


class AuditEventRepository:
    def record(
        self,
        session: Session,
        user_id: Optional[str],
        event_type: str,
        payload: Dict[str, Any],
        *,
        actor: str = "system",
    ) -> None:
        # Unknown users are recorded without the foreign key.
        if user_id is not None and session.get(ProfileModel, user_id) is None:
            payload = {**payload, "unlinked_user_id": user_id}
            user_id = None
        session.add(
            AuditEventModel(
                user_id=user_id,
                event_type=event_type,
                payload=payload,
                actor=actor,
            )
        )

    def recent(self, session: Session, user_id: str, *, limit: int = 20) -> List[AuditEventModel]:
        stmt = (
            select(AuditEventModel)
            .where(AuditEventModel.user_id == user_id)
            .order_by(AuditEventModel.created_at.desc())
            .limit(limit)
        )
        return list(session.execute(stmt).scalars().all())


audit_events = AuditEventRepository()

__all__ = ["AuditEventRepository", "audit_events"]
