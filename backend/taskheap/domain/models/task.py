from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple, Union
from enum import Enum

from taskheap.core.clock import utcnow


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


# Unknown priorities are tolerated and weigh 0
PRIORITY_WEIGHTS = {
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}


def enum_value(value: Union[Enum, str, None]) -> Optional[str]:
    """Plain string value of a str enum member (or of an already plain string)."""
    if isinstance(value, Enum):
        return value.value
    return value


class TaskAlreadyCompletedError(ValueError):
    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} is already completed")
        self.task_id = task_id


@dataclass
class Task:
    id: str
    name: str
    deadline: datetime
    priority: TaskPriority
    estimated_duration: int  # minutes
    status: TaskStatus = TaskStatus.PENDING
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    scheduled_start: Optional[datetime] = None

    # ──── Business Rules ────────────────────────────────────────────
    def priority_weight(self) -> int:
        return PRIORITY_WEIGHTS.get(enum_value(self.priority), 0)

    def duration(self) -> timedelta:
        return timedelta(minutes=self.estimated_duration)

    def interval(self) -> Tuple[datetime, datetime]:
        """Occupied work interval [deadline - duration, deadline]."""
        return self.deadline - self.duration(), self.deadline

    def overlaps_with(self, other: "Task") -> bool:
        start, end = self.interval()
        other_start, other_end = other.interval()
        return start < other_end and end > other_start

    def is_pending(self) -> bool:
        return enum_value(self.status) == TaskStatus.PENDING.value

    def is_completed(self) -> bool:
        return enum_value(self.status) == TaskStatus.COMPLETED.value

    def is_overdue(self, now: datetime) -> bool:
        return self.effective_status(now) == TaskStatus.OVERDUE

    def effective_status(self, now: datetime) -> TaskStatus:
        """
        Status as the engine sees it: a pending task past its deadline reads as
        overdue even though the stored status is still pending.
        """
        status = TaskStatus(enum_value(self.status))
        if status == TaskStatus.PENDING and self.deadline < now:
            return TaskStatus.OVERDUE
        return status

    def mark_completed(self, now: datetime) -> "CompletionRecord":
        """Terminal transition. Returns the history fact for this completion."""
        from taskheap.domain.models.history import CompletionRecord

        if self.is_completed():
            raise TaskAlreadyCompletedError(self.id)
        self.status = TaskStatus.COMPLETED
        self.completed_at = now
        return CompletionRecord(
            task_id=self.id,
            task_name=self.name,
            priority=self.priority,
            estimated_duration=self.estimated_duration,
            actual_duration=self.estimated_duration,
            completed_at=now,
            was_overdue=self.deadline < now,
        )
