from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from taskheap.domain.models.task import TaskPriority


@dataclass(frozen=True)
class CompletionRecord:
    """Immutable fact appended once per task completion."""
    task_id: str
    task_name: str
    priority: TaskPriority
    estimated_duration: int
    actual_duration: Optional[int]
    completed_at: datetime
    was_overdue: bool
    id: Optional[str] = None
