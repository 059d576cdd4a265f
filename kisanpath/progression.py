"""Lesson progression: locked / current / completed from completion history."""

from __future__ import annotations

from collections import Counter
from typing import AbstractSet, Iterable, List, Sequence

from .lesson_models import AnnotatedLesson, LessonBoard, LessonRecord, LessonStatus


def completion_frontier(
    lessons: Iterable[LessonRecord],
    completed_ids: AbstractSet[int],
    has_identity: bool,
) -> int:
    """Highest sequence among completed lessons, 0 for guests or no completions."""
    if not has_identity:
        return 0
    return max((lesson.sequence for lesson in lessons if lesson.id in completed_ids), default=0)


def lesson_status(lesson: LessonRecord, completed_ids: AbstractSet[int], frontier: int) -> LessonStatus:
    if lesson.id in completed_ids:
        return "completed"
    # With frontier 0 this is lesson 1, so a new learner always has a current lesson.
    if lesson.sequence == frontier + 1:
        return "current"
    return "locked"


def compute_statuses(
    lessons: Sequence[LessonRecord],
    completed_ids: AbstractSet[int],
    has_identity: bool,
) -> List[AnnotatedLesson]:
    """Annotate every lesson with its status.

    Guests never have completed lessons, whatever ``completed_ids`` holds.
    A gap in the sequence can leave no lesson ``current``; that is accepted.
    """
    effective = completed_ids if has_identity else frozenset()
    frontier = completion_frontier(lessons, effective, has_identity)
    return [
        AnnotatedLesson(**lesson.model_dump(), status=lesson_status(lesson, effective, frontier))
        for lesson in lessons
    ]


def summarize_board(lessons: Sequence[AnnotatedLesson]) -> LessonBoard:
    """Group annotated lessons for display and total up the earned points."""
    ordered = sorted(lessons, key=lambda lesson: lesson.sequence)
    completed = [lesson for lesson in ordered if lesson.status == "completed"]
    current = next((lesson for lesson in ordered if lesson.status == "current"), None)
    return LessonBoard(
        current=current,
        upcoming=[lesson for lesson in ordered if lesson.status == "locked"],
        completed=list(reversed(completed)),
        total_score=sum(lesson.points for lesson in completed),
        last_completed_sequence=max((lesson.sequence for lesson in completed), default=0),
    )


def sequence_problems(lessons: Iterable[LessonRecord]) -> List[str]:
    """Describe violations of the 1..N unique sequence invariant (empty when sound)."""
    sequences = [lesson.sequence for lesson in lessons]
    if not sequences:
        return []
    problems: List[str] = []
    duplicates = sorted(value for value, count in Counter(sequences).items() if count > 1)
    if duplicates:
        problems.append(f"duplicate sequence values: {duplicates}")
    present = set(sequences)
    if 1 not in present:
        problems.append("no lesson with sequence 1")
    gaps = sorted(set(range(1, max(present) + 1)) - present)
    if gaps:
        problems.append(f"missing sequence values: {gaps}")
    return problems


__all__ = [
    "completion_frontier",
    "compute_statuses",
    "lesson_status",
    "sequence_problems",
    "summarize_board",
]
