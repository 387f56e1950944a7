from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey
)
from sqlalchemy.orm import relationship
import uuid
from taskheap.core.clock import utcnow
from taskheap.infrastructure.database.session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class TaskORM(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    deadline = Column(DateTime, nullable=False, index=True)
    priority = Column(String(10), nullable=False)
    estimated_duration = Column(Integer, nullable=False)  # minutes
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime, nullable=True)
    scheduled_start = Column(DateTime, nullable=True)

    history = relationship("CompletionHistoryORM", back_populates="task", cascade="all, delete-orphan")


class CompletionHistoryORM(Base):
    __tablename__ = "completion_history"

    id = Column(String(36), primary_key=True, default=_uuid)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    task_name = Column(Text, nullable=False)
    priority = Column(String(10), nullable=False)
    estimated_duration = Column(Integer, nullable=False)
    actual_duration = Column(Integer, nullable=True)
    completed_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    was_overdue = Column(Boolean, nullable=False, default=False)

    task = relationship("TaskORM", back_populates="history")
