"""Load lesson content from JSON into the lessons table.

Lessons are matched on ``sequence``; existing rows are updated in place. Text
for a language is only written when the table already has that language's
slot columns, so a file can carry translations ahead of the migration that
adds them.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import column, insert, select, table, update
from sqlalchemy.orm import Session

from kisanpath.db.models import LESSONS_TABLE, LOCALIZED_FIELDS
from kisanpath.db.session import session_scope
from kisanpath.languages import DEFAULT_LANGUAGE
from kisanpath.repositories.lessons import lesson_repository, slot_name

logger = logging.getLogger("kisanpath.seed")

DATA_FILE = Path(__file__).resolve().parent / "data" / "lessons.json"


class LessonSeed(BaseModel):
    sequence: int = Field(gt=0)
    points: int = Field(default=0, ge=0)
    theme: Optional[str] = None
    title: Dict[str, str]
    description: Dict[str, str] = Field(default_factory=dict)
    content: Dict[str, str] = Field(default_factory=dict)


def _load(path: Path) -> List[LessonSeed]:
    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON list of lessons.")
    seeds: List[LessonSeed] = []
    for entry in payload:
        try:
            seeds.append(LessonSeed.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid lesson payload: %s", exc)
    return seeds


def _values(seed: LessonSeed, columns: FrozenSet[str]) -> Dict[str, object]:
    values: Dict[str, object] = {"sequence": seed.sequence, "points": seed.points, "theme": seed.theme}
    skipped: set[str] = set()
    for field in LOCALIZED_FIELDS:
        for language, text_value in getattr(seed, field).items():
            name = slot_name(field, language)
            if name in columns:
                values[name] = text_value
            else:
                skipped.add(language)
    if skipped:
        logger.info("Lesson %d: no slots yet for %s", seed.sequence, ", ".join(sorted(skipped)))
    return values


def seed_lessons(session: Session, seeds: List[LessonSeed]) -> Dict[str, int]:
    columns = lesson_repository.table_columns(session)
    slots = lesson_repository.language_slots(columns)
    logger.info("Lesson table stores languages: %s", ", ".join(sorted(slots)))

    lessons = table(LESSONS_TABLE, *(column(name) for name in sorted(columns)))
    counts = {"inserted": 0, "updated": 0}
    for seed in seeds:
        if DEFAULT_LANGUAGE not in seed.title:
            logger.warning("Skipping lesson %d without a %s title", seed.sequence, DEFAULT_LANGUAGE)
            continue
        values = _values(seed, columns)
        existing = session.execute(
            select(lessons.c.id).where(lessons.c.sequence == seed.sequence)
        ).scalar_one_or_none()
        if existing is None:
            session.execute(insert(lessons).values(**values))
            counts["inserted"] += 1
        else:
            session.execute(update(lessons).where(lessons.c.id == existing).values(**values))
            counts["updated"] += 1
    return counts


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed lesson content into the lesson store.")
    parser.add_argument("--file", type=Path, default=DATA_FILE)
    return parser.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args()
    seeds = _load(args.file)
    with session_scope() as session:
        counts = seed_lessons(session, seeds)
    logger.info("Seed completed: %d inserted, %d updated", counts["inserted"], counts["updated"])


if __name__ == "__main__":
    main()
