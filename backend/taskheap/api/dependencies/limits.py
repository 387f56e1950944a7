from fastapi import HTTPException, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import List
from taskheap.core.config import settings
from taskheap.core.logging import get_logger
from taskheap.domain.models.task import Task

logger = get_logger(__name__)

limiter = Limiter(key_func=get_remote_address)

# slowapi limit string for the O(n^2) endpoints
SCAN_RATE_LIMIT = f"{settings.RATE_LIMIT_PER_MINUTE}/minute"


def ensure_scan_size(tasks: List[Task]) -> None:
    """Refuse a pairwise conflict scan over more pending tasks than configured."""
    pending = sum(1 for t in tasks if t.is_pending())
    if pending > settings.CONFLICT_SCAN_MAX_TASKS:
        logger.warning(
            "Conflict scan refused",
            pending=pending,
            limit=settings.CONFLICT_SCAN_MAX_TASKS,
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Too many pending tasks for a conflict scan ({pending} > {settings.CONFLICT_SCAN_MAX_TASKS})",
        )
