from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List
from taskheap.core.logging import get_logger
from taskheap.domain.models.task import TaskPriority
from taskheap.domain.services.priority_queue import TaskPriorityQueue
from taskheap.domain.services.scheduling import detect_conflicts
from taskheap.infrastructure.database.session import get_db
from taskheap.infrastructure.repositories.task_repository import TaskRepository
from taskheap.api.dependencies.limits import limiter, ensure_scan_size, SCAN_RATE_LIMIT
from taskheap.api.schemas import (
    HeapSnapshotResponse, ConflictReportResponse, PriorityUpdate, TaskResponse
)

router = APIRouter(tags=["Scheduling"])
logger = get_logger(__name__)


def _snapshot(queue: TaskPriorityQueue) -> HeapSnapshotResponse:
    return HeapSnapshotResponse(
        size=queue.size(),
        tasks=[TaskResponse.model_validate(t) for t in queue.tasks()],
    )


# ──── Priority queue ──────────────────────────────────────────────────────────
# The heap is rebuilt from a fresh snapshot on every request, so no instance
# is ever shared between requests.
@router.get("/priority-queue", response_model=HeapSnapshotResponse)
def get_priority_queue(db: Session = Depends(get_db)):
    """
    Max-heap of pending tasks in array order. Index 0 is the most urgent task;
    the order of the remaining entries only satisfies the heap property.
    """
    repo = TaskRepository(db)
    return _snapshot(TaskPriorityQueue(repo.fetch_all_tasks()))


@router.get("/priority-queue/next", response_model=TaskResponse)
def get_next_task(db: Session = Depends(get_db)):
    """The highest-scoring pending task."""
    repo = TaskRepository(db)
    top = TaskPriorityQueue(repo.fetch_all_tasks()).peek()
    if top is None:
        raise HTTPException(status_code=404, detail="No pending tasks")
    return top


@router.get("/priority-queue/order", response_model=List[TaskResponse])
def get_priority_order(db: Session = Depends(get_db)):
    """Pending tasks in extraction order, most urgent first."""
    repo = TaskRepository(db)
    queue = TaskPriorityQueue(repo.fetch_all_tasks())
    ordered = []
    while len(queue):
        ordered.append(queue.extract_max())
    return ordered


@router.patch("/priority-queue/{task_id}/priority", response_model=HeapSnapshotResponse)
def update_task_priority(task_id: str, data: PriorityUpdate, db: Session = Depends(get_db)):
    """Change a task's priority and return the rebalanced heap."""
    repo = TaskRepository(db)
    row = repo.get_by_id(task_id)
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")

    queue = TaskPriorityQueue(repo.fetch_all_tasks())
    queue.update_priority(task_id, TaskPriority(data.priority))

    row.priority = data.priority
    repo.update(row)
    logger.info("Task priority updated", task_id=task_id, priority=data.priority, queued=task_id in queue)
    return _snapshot(queue)


# ──── Conflicts ───────────────────────────────────────────────────────────────
@router.get("/conflicts", response_model=ConflictReportResponse)
@limiter.limit(SCAN_RATE_LIMIT)
def get_conflicts(request: Request, db: Session = Depends(get_db)):
    """Pending tasks whose deadline-derived work intervals overlap."""
    repo = TaskRepository(db)
    tasks = repo.fetch_all_tasks()
    ensure_scan_size(tasks)
    report = detect_conflicts(tasks)
    logger.info(
        "Conflict scan",
        tasks=len(tasks),
        conflicts=len(report.conflicting_tasks),
    )
    return report
