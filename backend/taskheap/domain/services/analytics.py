"""
Analytics Calculator: pure domain logic.
Summarises the task set and the completion history into counts, rates and a
7-day completion trend.
"""
from datetime import datetime, timedelta
from typing import List, Dict, Any

from taskheap.domain.models.task import Task, TaskPriority, TaskStatus, enum_value
from taskheap.domain.models.history import CompletionRecord

TREND_DAYS = 7


class AnalyticsCalculator:

    def compute(
        self,
        tasks: List[Task],
        history: List[CompletionRecord],
        now: datetime
    ) -> Dict[str, Any]:
        total = len(tasks)
        completed = overdue = pending = 0
        by_priority = {p.value: 0 for p in (TaskPriority.HIGH, TaskPriority.MEDIUM, TaskPriority.LOW)}

        for task in tasks:
            status = enum_value(task.status)
            if status == TaskStatus.COMPLETED.value:
                completed += 1
            elif status == TaskStatus.OVERDUE.value or (
                status == TaskStatus.PENDING.value and task.deadline < now
            ):
                overdue += 1
            elif status == TaskStatus.PENDING.value:
                pending += 1

            priority = enum_value(task.priority)
            if priority in by_priority:
                by_priority[priority] += 1

        completion_rate = (completed / total * 100) if total else 0.0

        durations = [h.actual_duration for h in history if h.actual_duration is not None]
        average_completion_time = (sum(durations) / len(durations)) if durations else 0.0

        productivity_score = completion_rate * (1 - overdue / max(total, 1)) * 100

        return {
            "total_tasks": total,
            "completed_tasks": completed,
            "overdue_tasks": overdue,
            "pending_tasks": pending,
            "completion_rate": completion_rate,
            "average_completion_time": average_completion_time,
            "productivity_score": productivity_score,
            "tasks_by_priority": by_priority,
            "completion_trend": self.completion_trend(history, now),
        }

    def completion_trend(self, history: List[CompletionRecord], now: datetime) -> List[Dict[str, Any]]:
        """One bucket per calendar day, oldest first, ending today."""
        today = now.date()
        days = [today - timedelta(days=offset) for offset in range(TREND_DAYS - 1, -1, -1)]
        buckets = {day: {"date": day.isoformat(), "completed": 0, "overdue": 0} for day in days}

        for record in history:
            bucket = buckets.get(record.completed_at.date())
            if bucket is None:
                continue
            if record.was_overdue:
                bucket["overdue"] += 1
            else:
                bucket["completed"] += 1

        return [buckets[day] for day in days]
