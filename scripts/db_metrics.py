"""Print one JSON line with the lesson store's pool counters and catalog shape."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from sqlalchemy import func, select

from kisanpath.db.models import LessonCompletionModel, LessonModel
from kisanpath.db.monitoring import get_pool_snapshot
from kisanpath.db.session import get_engine, session_scope
from kisanpath.repositories.lessons import lesson_repository

LOGGER = logging.getLogger("kisanpath.db_metrics")


def collect() -> dict:
    engine = get_engine()
    with session_scope(commit=False) as session:
        columns = lesson_repository.table_columns(session)
        lessons = session.execute(select(func.count()).select_from(LessonModel)).scalar_one()
        completions = session.execute(select(func.count()).select_from(LessonCompletionModel)).scalar_one()
    slots = lesson_repository.language_slots(columns)
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dialect": engine.dialect.name,
        "lessons": lessons,
        "completions": completions,
        "languages": {language: sorted(fields) for language, fields in sorted(slots.items())},
        "pool": get_pool_snapshot(engine),
    }


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    try:
        payload = collect()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Failed to collect database metrics: %s", exc)
        return 1
    print(json.dumps(payload))
    return 0


if __name__ == "__main__":
    sys.exit(main())
