from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List
from taskheap.core.clock import utcnow
from taskheap.core.logging import get_logger
from taskheap.domain.services.analytics import AnalyticsCalculator
from taskheap.domain.services.recommendations import RecommendationEngine
from taskheap.infrastructure.database.session import get_db
from taskheap.infrastructure.repositories.task_repository import TaskRepository
from taskheap.api.dependencies.limits import limiter, ensure_scan_size, SCAN_RATE_LIMIT
from taskheap.api.schemas import (
    AnalyticsResponse, CompletionRecordResponse, RecommendationResponse
)

router = APIRouter(prefix="/analytics", tags=["Analytics & Recommendations"])
logger = get_logger(__name__)


@router.get("", response_model=AnalyticsResponse)
def get_analytics(db: Session = Depends(get_db)):
    """Task counts, completion/productivity rates and the 7-day completion trend."""
    repo = TaskRepository(db)
    calc = AnalyticsCalculator()
    return calc.compute(repo.fetch_all_tasks(), repo.fetch_completion_history(), utcnow())


@router.get("/history", response_model=List[CompletionRecordResponse])
def get_completion_history(db: Session = Depends(get_db)):
    """Completion records, newest first."""
    repo = TaskRepository(db)
    return repo.list_history()


@router.get("/recommendations", response_model=List[RecommendationResponse])
@limiter.limit(SCAN_RATE_LIMIT)
def get_recommendations(request: Request, db: Session = Depends(get_db)):
    """Break, workload, deadline and reschedule advice, in that order."""
    repo = TaskRepository(db)
    tasks = repo.fetch_all_tasks()
    ensure_scan_size(tasks)
    engine = RecommendationEngine()
    recommendations = engine.generate(tasks, repo.fetch_completion_history(), utcnow())
    logger.info("Recommendations generated", count=len(recommendations),
                types=[r.type.value for r in recommendations])
    return recommendations
