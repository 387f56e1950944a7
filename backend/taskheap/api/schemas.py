from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from taskheap.core.clock import to_naive_utc
from taskheap.domain.models.task import TaskPriority, TaskStatus
from taskheap.domain.models.insights import RecommendationType, Severity

PRIORITY_PATTERN = "^(high|medium|low)$"
STATUS_PATTERN = "^(pending|completed|overdue)$"
# Completion goes through the complete operation only
OPEN_STATUS_PATTERN = "^(pending|overdue)$"


# ──── Task ────────────────────────────────────────────────────────────────────
class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    deadline: datetime
    priority: str = Field(default="medium", pattern=PRIORITY_PATTERN)
    estimated_duration: int = Field(..., gt=0, description="Minutes")
    status: Optional[str] = Field(default=None, pattern=OPEN_STATUS_PATTERN)

    @field_validator("deadline")
    @classmethod
    def deadline_to_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)
    estimated_duration: Optional[int] = Field(None, gt=0)
    status: Optional[str] = Field(None, pattern=OPEN_STATUS_PATTERN)

    @field_validator("deadline")
    @classmethod
    def deadline_to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v) if v is not None else v


class TaskResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    deadline: datetime
    priority: TaskPriority
    estimated_duration: int
    status: TaskStatus
    created_at: datetime
    completed_at: Optional[datetime]
    scheduled_start: Optional[datetime]

    class Config:
        from_attributes = True


class PriorityUpdate(BaseModel):
    priority: str = Field(..., pattern=PRIORITY_PATTERN)


# ──── Completion history ──────────────────────────────────────────────────────
class CompletionRecordResponse(BaseModel):
    id: str
    task_id: str
    task_name: str
    priority: TaskPriority
    estimated_duration: int
    actual_duration: Optional[int]
    completed_at: datetime
    was_overdue: bool

    class Config:
        from_attributes = True


# ──── Scheduling ──────────────────────────────────────────────────────────────
class HeapSnapshotResponse(BaseModel):
    size: int
    tasks: List[TaskResponse]


class ConflictReportResponse(BaseModel):
    has_conflict: bool
    conflicting_tasks: List[TaskResponse]
    recommendations: List[str]

    class Config:
        from_attributes = True


class RescheduleResponse(BaseModel):
    task: TaskResponse
    new_deadline: datetime
    message: str


# ──── Analytics ───────────────────────────────────────────────────────────────
class PriorityCounts(BaseModel):
    high: int
    medium: int
    low: int


class TrendPoint(BaseModel):
    date: str
    completed: int
    overdue: int


class AnalyticsResponse(BaseModel):
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int
    pending_tasks: int
    completion_rate: float
    average_completion_time: float
    productivity_score: float
    tasks_by_priority: PriorityCounts
    completion_trend: List[TrendPoint]


class RecommendationResponse(BaseModel):
    type: RecommendationType
    message: str
    severity: Severity
    related_tasks: Optional[List[str]] = None

    class Config:
        from_attributes = True


# ──── Generic ─────────────────────────────────────────────────────────────────
class MessageResponse(BaseModel):
    message: str
