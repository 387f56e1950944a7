"""
Scheduling Engine: pure domain logic, no framework dependency.
Chronological ordering, deadline-overlap conflicts and greedy rescheduling.

A task's work is modelled as the interval [deadline - estimated_duration, deadline].
"""
from datetime import datetime, timedelta
from typing import List, Set

from taskheap.domain.models.task import Task, enum_value
from taskheap.domain.models.insights import ConflictReport

RESCHEDULE_GAP = timedelta(minutes=1)


def sort_by_deadline(tasks: List[Task]) -> List[Task]:
    """Stable ascending sort by deadline. The input list is left untouched."""
    return sorted(tasks, key=lambda t: t.deadline)


def _conflict_message(keep: Task, move: Task) -> str:
    if move.priority_weight() < keep.priority_weight():
        return (
            f'Consider rescheduling "{move.name}" ({enum_value(move.priority)} priority) '
            f'as it conflicts with higher priority task "{keep.name}"'
        )
    return (
        f'Consider rescheduling "{move.name}" ({enum_value(move.priority)} priority) '
        f'as it conflicts with "{keep.name}" ({enum_value(keep.priority)} priority)'
    )


def detect_conflicts(tasks: List[Task]) -> ConflictReport:
    """
    Pairwise overlap scan over pending tasks.

    O(n^2) in the number of pending tasks; fine for personal task lists, but a
    sweep over deadline-sorted intervals should replace it for large sets.
    The lower-priority task of each pair is the one suggested for rescheduling;
    on equal priority the later task in scan order is suggested.
    """
    pending = [t for t in tasks if t.is_pending()]
    conflicting: List[Task] = []
    seen: Set[str] = set()
    recommendations: List[str] = []

    for i in range(len(pending)):
        for j in range(i + 1, len(pending)):
            a, b = pending[i], pending[j]
            if not a.overlaps_with(b):
                continue
            for t in (a, b):
                if t.id not in seen:
                    seen.add(t.id)
                    conflicting.append(t)
            if a.priority_weight() < b.priority_weight():
                recommendations.append(_conflict_message(keep=b, move=a))
            else:
                recommendations.append(_conflict_message(keep=a, move=b))

    return ConflictReport(
        has_conflict=bool(conflicting),
        conflicting_tasks=conflicting,
        recommendations=recommendations,
    )


def reschedule_task(task: Task, all_tasks: List[Task]) -> datetime:
    """
    Earliest deadline, at or after the current one, whose work interval does not
    overlap any other pending task.

    Single forward pass over the other pending tasks in deadline order. Whenever
    the proposed interval overlaps one, it is moved to start RESCHEDULE_GAP after
    that task's deadline. Greedy: deterministic, not guaranteed globally earliest.
    """
    duration = task.duration()
    proposed_end = task.deadline

    others = sort_by_deadline(
        [t for t in all_tasks if t.id != task.id and t.is_pending()]
    )
    for existing in others:
        existing_start, existing_end = existing.interval()
        if proposed_end - duration < existing_end and proposed_end > existing_start:
            proposed_end = existing_end + RESCHEDULE_GAP + duration

    return proposed_end
