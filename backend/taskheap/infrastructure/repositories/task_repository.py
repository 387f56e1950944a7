from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime
from taskheap.core.clock import utcnow
from taskheap.domain.models.task import Task, TaskPriority, TaskStatus, enum_value
from taskheap.domain.models.history import CompletionRecord
from taskheap.infrastructure.database.models import TaskORM, CompletionHistoryORM


def task_to_domain(row: TaskORM) -> Task:
    return Task(
        id=row.id,
        name=row.name,
        description=row.description,
        deadline=row.deadline,
        priority=TaskPriority(row.priority),
        estimated_duration=row.estimated_duration,
        status=TaskStatus(row.status),
        created_at=row.created_at,
        completed_at=row.completed_at,
        scheduled_start=row.scheduled_start,
    )


def history_to_domain(row: CompletionHistoryORM) -> CompletionRecord:
    return CompletionRecord(
        id=row.id,
        task_id=row.task_id,
        task_name=row.task_name,
        priority=TaskPriority(row.priority),
        estimated_duration=row.estimated_duration,
        actual_duration=row.actual_duration,
        completed_at=row.completed_at,
        was_overdue=row.was_overdue,
    )


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, task_id: str) -> Optional[TaskORM]:
        return self.db.query(TaskORM).filter(TaskORM.id == task_id).first()

    def list_all(self, status: str = None, priority: str = None) -> List[TaskORM]:
        q = self.db.query(TaskORM)
        if status:
            q = q.filter(TaskORM.status == status)
        if priority:
            q = q.filter(TaskORM.priority == priority)
        return q.order_by(TaskORM.created_at.desc()).all()

    def create(self, data: dict) -> TaskORM:
        task = TaskORM(**data)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        return task

    def update(self, task: TaskORM) -> TaskORM:
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, task_id: str) -> bool:
        task = self.get_by_id(task_id)
        if not task:
            return False
        self.db.delete(task)
        self.db.commit()
        return True

    def complete(self, task: TaskORM, now: Optional[datetime] = None) -> TaskORM:
        """
        Apply the domain completion to the row and append its history record in
        one commit. Raises TaskAlreadyCompletedError for a completed task.
        """
        domain_task = task_to_domain(task)
        record = domain_task.mark_completed(now or utcnow())

        task.status = enum_value(domain_task.status)
        task.completed_at = domain_task.completed_at
        self.db.add(CompletionHistoryORM(
            task_id=record.task_id,
            task_name=record.task_name,
            priority=enum_value(record.priority),
            estimated_duration=record.estimated_duration,
            actual_duration=record.actual_duration,
            completed_at=record.completed_at,
            was_overdue=record.was_overdue,
        ))
        self.db.commit()
        self.db.refresh(task)
        return task

    def list_history(self) -> List[CompletionHistoryORM]:
        return self.db.query(CompletionHistoryORM).order_by(
            CompletionHistoryORM.completed_at.desc()
        ).all()

    # ──── Engine snapshots ────────────────────────────────────────────────────
    def fetch_all_tasks(self) -> List[Task]:
        return [task_to_domain(row) for row in self.list_all()]

    def fetch_completion_history(self) -> List[CompletionRecord]:
        return [history_to_domain(row) for row in self.list_history()]
