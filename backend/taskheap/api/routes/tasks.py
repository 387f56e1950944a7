from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from dataclasses import replace
from typing import List, Optional
from taskheap.core.clock import utcnow
from taskheap.core.logging import get_logger
from taskheap.domain.models.task import TaskAlreadyCompletedError, TaskStatus
from taskheap.domain.services.scheduling import reschedule_task, sort_by_deadline
from taskheap.infrastructure.database.session import get_db
from taskheap.infrastructure.repositories.task_repository import TaskRepository, task_to_domain
from taskheap.api.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, RescheduleResponse, MessageResponse,
    PRIORITY_PATTERN, STATUS_PATTERN
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])
logger = get_logger(__name__)


def _get_or_404(repo: TaskRepository, task_id: str):
    task = repo.get_by_id(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN, description="Filter by status"),
    priority: Optional[str] = Query(None, pattern=PRIORITY_PATTERN, description="Filter by priority"),
    db: Session = Depends(get_db)
):
    """
    List all tasks, newest first.

    Pending tasks whose deadline has passed are reported as `overdue`; the stored
    row is not modified.
    """
    repo = TaskRepository(db)
    now = utcnow()
    tasks = [task_to_domain(row) for row in repo.list_all(priority=priority)]
    tasks = [replace(t, status=t.effective_status(now)) for t in tasks]
    if status:
        tasks = [t for t in tasks if t.status == TaskStatus(status)]
    return tasks


@router.get("/sorted/deadline", response_model=List[TaskResponse])
def list_tasks_by_deadline(db: Session = Depends(get_db)):
    """All tasks in ascending deadline order."""
    repo = TaskRepository(db)
    return sort_by_deadline(repo.fetch_all_tasks())


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(data: TaskCreate, db: Session = Depends(get_db)):
    """Create a new task."""
    repo = TaskRepository(db)
    task_data = data.model_dump()
    task_data["status"] = task_data.get("status") or TaskStatus.PENDING.value
    task = repo.create(task_data)
    logger.info("Task created", task_id=task.id, priority=task.priority)
    return task


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, db: Session = Depends(get_db)):
    """Get a specific task by ID."""
    repo = TaskRepository(db)
    return _get_or_404(repo, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, data: TaskUpdate, db: Session = Depends(get_db)):
    """Update task fields. Completed tasks cannot be reopened."""
    repo = TaskRepository(db)
    task = _get_or_404(repo, task_id)
    changes = data.model_dump(exclude_none=True)
    if "status" in changes and task.status == TaskStatus.COMPLETED.value:
        raise HTTPException(status_code=409, detail="Completed tasks cannot be reopened")
    for field, value in changes.items():
        setattr(task, field, value)
    task = repo.update(task)
    logger.info("Task updated", task_id=task_id, fields=sorted(changes))
    return task


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(task_id: str, db: Session = Depends(get_db)):
    """Delete a task together with its completion history."""
    repo = TaskRepository(db)
    if not repo.delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    logger.info("Task deleted", task_id=task_id)
    return MessageResponse(message="Task deleted")


@router.post("/{task_id}/complete", response_model=TaskResponse)
def complete_task(task_id: str, db: Session = Depends(get_db)):
    """Mark a task as completed and record it in the completion history."""
    repo = TaskRepository(db)
    task = _get_or_404(repo, task_id)
    try:
        task = repo.complete(task, utcnow())
    except TaskAlreadyCompletedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("Task completed", task_id=task_id)
    return task


@router.post("/{task_id}/reschedule", response_model=RescheduleResponse)
def reschedule(task_id: str, db: Session = Depends(get_db)):
    """
    Move the task's deadline to the earliest slot, at or after its current
    deadline, that does not overlap another pending task.
    """
    repo = TaskRepository(db)
    row = _get_or_404(repo, task_id)
    target = task_to_domain(row)
    new_deadline = reschedule_task(target, repo.fetch_all_tasks())

    row.deadline = new_deadline
    row.scheduled_start = new_deadline - target.duration()
    row = repo.update(row)
    logger.info(
        "Task rescheduled",
        task_id=task_id,
        old_deadline=target.deadline.isoformat(),
        new_deadline=new_deadline.isoformat(),
    )
    return RescheduleResponse(
        task=TaskResponse.model_validate(row),
        new_deadline=new_deadline,
        message="Task successfully rescheduled to avoid conflicts",
    )
