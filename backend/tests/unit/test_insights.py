"""
Unit tests for the analytics calculator and the recommendation engine.
"""
from datetime import datetime, timedelta

from taskheap.domain.models.task import Task, TaskPriority, TaskStatus
from taskheap.domain.models.history import CompletionRecord
from taskheap.domain.models.insights import RecommendationType, Severity
from taskheap.domain.services.analytics import AnalyticsCalculator
from taskheap.domain.services.recommendations import RecommendationEngine

NOW = datetime(2025, 1, 6, 12, 0)


def make_task(id, hours=5, duration=30, priority=TaskPriority.MEDIUM, status=TaskStatus.PENDING):
    return Task(
        id=id, name=f"Task {id}",
        deadline=NOW + timedelta(hours=hours),
        priority=priority,
        estimated_duration=duration,
        status=status,
    )


def make_record(completed_at, overdue=False, actual=30):
    return CompletionRecord(
        task_id="x", task_name="X", priority=TaskPriority.MEDIUM,
        estimated_duration=30, actual_duration=actual,
        completed_at=completed_at, was_overdue=overdue,
    )


# ──── Analytics tests ─────────────────────────────────────────────────────────
class TestAnalyticsCalculator:

    def setup_method(self):
        self.calc = AnalyticsCalculator()

    def test_empty_input(self):
        result = self.calc.compute([], [], NOW)
        assert result["total_tasks"] == 0
        assert result["completion_rate"] == 0.0
        assert result["average_completion_time"] == 0.0
        assert result["productivity_score"] == 0.0
        assert result["tasks_by_priority"] == {"high": 0, "medium": 0, "low": 0}
        assert len(result["completion_trend"]) == 7

    def test_status_buckets(self):
        tasks = [
            make_task("done", status=TaskStatus.COMPLETED, priority=TaskPriority.HIGH),
            make_task("late", hours=-1),
            make_task("flagged", status=TaskStatus.OVERDUE, priority=TaskPriority.LOW),
            make_task("open", hours=3),
        ]
        result = self.calc.compute(tasks, [], NOW)
        assert result["total_tasks"] == 4
        assert result["completed_tasks"] == 1
        assert result["overdue_tasks"] == 2
        assert result["pending_tasks"] == 1
        assert result["completion_rate"] == 25.0
        assert result["productivity_score"] == 25.0 * (1 - 2 / 4) * 100
        assert result["tasks_by_priority"] == {"high": 1, "medium": 2, "low": 1}

    def test_buckets_never_exceed_total(self):
        tasks = [make_task(str(i), hours=i - 3) for i in range(7)]
        tasks.append(make_task("c", status=TaskStatus.COMPLETED))
        result = self.calc.compute(tasks, [], NOW)
        counted = result["completed_tasks"] + result["overdue_tasks"] + result["pending_tasks"]
        assert counted <= result["total_tasks"]
        assert 0 <= result["completion_rate"] <= 100

    def test_average_completion_time_skips_missing(self):
        history = [make_record(NOW, actual=20), make_record(NOW, actual=40), make_record(NOW, actual=None)]
        result = self.calc.compute([], history, NOW)
        assert result["average_completion_time"] == 30.0

    def test_completion_trend_window(self):
        history = [
            make_record(NOW - timedelta(hours=1)),
            make_record(NOW - timedelta(hours=2), overdue=True),
            make_record(NOW - timedelta(days=1), overdue=True),
            make_record(NOW - timedelta(days=6)),
            make_record(NOW - timedelta(days=10)),
        ]
        trend = self.calc.compute([], history, NOW)["completion_trend"]

        expected_dates = [(NOW.date() - timedelta(days=d)).isoformat() for d in range(6, -1, -1)]
        assert [p["date"] for p in trend] == expected_dates
        assert trend[-1] == {"date": "2025-01-06", "completed": 1, "overdue": 1}
        assert trend[-2] == {"date": "2025-01-05", "completed": 0, "overdue": 1}
        assert trend[0] == {"date": "2024-12-31", "completed": 1, "overdue": 0}
        assert sum(p["completed"] + p["overdue"] for p in trend) == 4


# ──── Recommendation engine tests ─────────────────────────────────────────────
class TestRecommendationEngine:

    def setup_method(self):
        self.engine = RecommendationEngine()

    def types(self, recs):
        return [r.type for r in recs]

    def test_nothing_to_say(self):
        assert self.engine.generate([make_task("a", hours=48)], [], NOW) == []

    def test_break_after_three_recent_completions(self):
        history = [make_record(NOW - timedelta(minutes=m)) for m in (10, 50, 100)]
        recs = self.engine.generate([], history, NOW)
        assert self.types(recs) == [RecommendationType.BREAK]
        assert recs[0].severity == Severity.INFO
        assert "90 minutes" in recs[0].message

    def test_no_break_for_old_completions(self):
        history = [make_record(NOW - timedelta(minutes=10)), make_record(NOW - timedelta(minutes=20))]
        history += [make_record(NOW - timedelta(hours=3)) for _ in range(3)]
        assert self.engine.generate([], history, NOW) == []

    def test_workload_with_five_high_priority(self):
        tasks = [make_task(f"h{i}", hours=48 + 2 * i, priority=TaskPriority.HIGH) for i in range(5)]
        recs = self.engine.generate(tasks, [], NOW)
        assert self.types(recs) == [RecommendationType.WORKLOAD]
        assert recs[0].severity == Severity.WARNING
        assert recs[0].related_tasks == ["h0", "h1", "h2"]

    def test_workload_ignores_completed(self):
        tasks = [make_task(f"h{i}", hours=48 + 2 * i, priority=TaskPriority.HIGH) for i in range(4)]
        tasks.append(make_task("done", hours=60, priority=TaskPriority.HIGH, status=TaskStatus.COMPLETED))
        assert self.engine.generate(tasks, [], NOW) == []

    def test_deadline_warning(self):
        tasks = [make_task("soon", hours=3), make_task("past", hours=-3), make_task("far", hours=30)]
        recs = self.engine.generate(tasks, [], NOW)
        assert self.types(recs) == [RecommendationType.DEADLINE]
        assert recs[0].severity == Severity.WARNING
        assert recs[0].related_tasks == ["soon"]

    def test_deadline_critical_above_three(self):
        tasks = [make_task(f"d{i}", hours=2 + 3 * i) for i in range(4)]
        recs = self.engine.generate(tasks, [], NOW)
        assert recs[0].type == RecommendationType.DEADLINE
        assert recs[0].severity == Severity.CRITICAL
        assert len(recs[0].related_tasks) == 4

    def test_reschedule_on_conflict(self):
        tasks = [make_task("a", hours=30, duration=60), make_task("b", hours=30, duration=60)]
        recs = self.engine.generate(tasks, [], NOW)
        assert self.types(recs) == [RecommendationType.RESCHEDULE]
        assert recs[0].related_tasks == ["a", "b"]

    def test_all_rules_fire_in_fixed_order(self):
        tasks = [make_task(f"h{i}", hours=2, duration=60, priority=TaskPriority.HIGH) for i in range(5)]
        history = [make_record(NOW - timedelta(minutes=15)) for _ in range(4)]
        recs = self.engine.generate(tasks, history, NOW)
        assert self.types(recs) == [
            RecommendationType.BREAK,
            RecommendationType.WORKLOAD,
            RecommendationType.DEADLINE,
            RecommendationType.RESCHEDULE,
        ]
        assert recs[2].severity == Severity.CRITICAL
        assert len(recs[3].related_tasks) == 3
