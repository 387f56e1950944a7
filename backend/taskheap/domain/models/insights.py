from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum

from taskheap.domain.models.task import Task


# ──── Conflicts ───────────────────────────────────────────────────────────────
@dataclass
class ConflictReport:
    has_conflict: bool
    conflicting_tasks: List[Task] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


# ──── Recommendations ─────────────────────────────────────────────────────────
class RecommendationType(str, Enum):
    BREAK = "break"
    WORKLOAD = "workload"
    RESCHEDULE = "reschedule"
    DEADLINE = "deadline"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class Recommendation:
    type: RecommendationType
    message: str
    severity: Severity
    related_tasks: Optional[List[str]] = None
