"""
Recommendation Engine: heuristic rules over the task set and recent history.
Every rule is evaluated; emission order is fixed: break, workload, deadline, reschedule.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from taskheap.domain.models.task import Task, TaskPriority, enum_value
from taskheap.domain.models.history import CompletionRecord
from taskheap.domain.models.insights import (
    ConflictReport, Recommendation, RecommendationType, Severity
)
from taskheap.domain.services.scheduling import detect_conflicts

RECENT_WORK_WINDOW = timedelta(hours=2)
MINUTES_PER_COMPLETION = 30   # each recent completion counts as 30 min of work
BREAK_AFTER_MINUTES = 90
WORKLOAD_HIGH_PRIORITY_LIMIT = 5
DEADLINE_HORIZON = timedelta(hours=24)
DEADLINE_CRITICAL_COUNT = 3
MAX_RELATED_TASKS = 3


class RecommendationEngine:

    def generate(
        self,
        tasks: List[Task],
        history: List[CompletionRecord],
        now: datetime,
        conflicts: Optional[ConflictReport] = None
    ) -> List[Recommendation]:
        """`conflicts` may be passed in when the caller already ran the scan."""
        pending = [t for t in tasks if t.is_pending()]
        if conflicts is None:
            conflicts = detect_conflicts(tasks)

        rules = [
            self._break_rule(history, now),
            self._workload_rule(pending),
            self._deadline_rule(pending, now),
            self._reschedule_rule(conflicts),
        ]
        return [r for r in rules if r is not None]

    # ──── Rules ───────────────────────────────────────────────────────────────
    def _break_rule(self, history: List[CompletionRecord], now: datetime) -> Optional[Recommendation]:
        recent = [h for h in history if now - h.completed_at <= RECENT_WORK_WINDOW]
        minutes_worked = len(recent) * MINUTES_PER_COMPLETION
        if minutes_worked < BREAK_AFTER_MINUTES:
            return None
        return Recommendation(
            type=RecommendationType.BREAK,
            message=(
                f"You've been working for {minutes_worked} minutes. "
                "Consider taking a 10-15 minute break to maintain productivity."
            ),
            severity=Severity.INFO,
        )

    def _workload_rule(self, pending: List[Task]) -> Optional[Recommendation]:
        high = [t for t in pending if enum_value(t.priority) == TaskPriority.HIGH.value]
        if len(high) < WORKLOAD_HIGH_PRIORITY_LIMIT:
            return None
        return Recommendation(
            type=RecommendationType.WORKLOAD,
            message=(
                f"You have {len(high)} high-priority tasks. Consider rescheduling some "
                "medium or low-priority tasks to focus on critical work."
            ),
            severity=Severity.WARNING,
            related_tasks=[t.id for t in high[:MAX_RELATED_TASKS]],
        )

    def _deadline_rule(self, pending: List[Task], now: datetime) -> Optional[Recommendation]:
        upcoming = [t for t in pending if now < t.deadline <= now + DEADLINE_HORIZON]
        if not upcoming:
            return None
        return Recommendation(
            type=RecommendationType.DEADLINE,
            message=(
                f"You have {len(upcoming)} task(s) due within 24 hours. "
                "Make sure to prioritize these tasks."
            ),
            severity=Severity.CRITICAL if len(upcoming) > DEADLINE_CRITICAL_COUNT else Severity.WARNING,
            related_tasks=[t.id for t in upcoming],
        )

    def _reschedule_rule(self, conflicts: ConflictReport) -> Optional[Recommendation]:
        if not conflicts.has_conflict:
            return None
        return Recommendation(
            type=RecommendationType.RESCHEDULE,
            message=(
                f"You have {len(conflicts.conflicting_tasks)} tasks with scheduling conflicts. "
                "Review and reschedule to optimize your time."
            ),
            severity=Severity.WARNING,
            related_tasks=[t.id for t in conflicts.conflicting_tasks[:MAX_RELATED_TASKS]],
        )
