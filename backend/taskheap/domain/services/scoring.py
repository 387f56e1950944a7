"""
Task scoring: pure domain logic.
One integer per task: the priority tier dominates, an earlier deadline breaks
ties inside a tier.
"""
from datetime import datetime

from taskheap.domain.models.task import Task

# Large enough that weight * factor outweighs any representable epoch-millis deadline
PRIORITY_SCORE_FACTOR = 10 ** 15

_EPOCH = datetime(1970, 1, 1)


def deadline_millis(task: Task) -> int:
    delta = task.deadline - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def score(task: Task) -> int:
    return task.priority_weight() * PRIORITY_SCORE_FACTOR - deadline_millis(task)
