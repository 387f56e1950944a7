from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import time

from taskheap.core.config import settings
from taskheap.core.logging import setup_logging, get_logger
from taskheap.infrastructure.database.session import engine
from taskheap.infrastructure.database import models  # noqa: F401
from taskheap.infrastructure.database.session import Base
from taskheap.api.dependencies.limits import limiter
from taskheap.api.routes import tasks, scheduling, analytics

# ──── Init ────────────────────────────────────────────────────────────────────
setup_logging()
logger = get_logger(__name__)
Base.metadata.create_all(bind=engine)

# ──── App ─────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="TASKHEAP API",
    version=settings.APP_VERSION,
    description="""
## Task Scheduling Engine

Prioritises pending tasks with a max-heap keyed on priority tier and deadline,
detects deadline overlaps, reschedules conflicting tasks and turns completion
history into analytics and recommendations.

- `GET /api/v1/priority-queue`: heap snapshot
- `GET /api/v1/conflicts`: overlapping pending tasks
- `POST /api/v1/tasks/{id}/reschedule`: move a task to a free slot
- `GET /api/v1/analytics` and `/api/v1/analytics/recommendations`
    """,
)

# ──── Middleware ──────────────────────────────────────────────────────────────
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.info(
        "HTTP request",
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=duration
    )
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ──── Routers ─────────────────────────────────────────────────────────────────
app.include_router(tasks.router, prefix="/api/v1")
app.include_router(scheduling.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")


# ──── Health ──────────────────────────────────────────────────────────────────
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok", "app": settings.APP_NAME, "version": settings.APP_VERSION}


@app.get("/", tags=["System"])
def root():
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "docs": "/docs",
        "redoc": "/redoc",
        "version": settings.APP_VERSION,
    }
