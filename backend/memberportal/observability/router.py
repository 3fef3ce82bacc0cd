"""Operational endpoints: Prometheus scrape target and health check."""

import time

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.job_lock import JobLock
from ..retention.lock import RETENTION_LOCK_NAME
from .logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check",
    description="200 when the database answers, 503 otherwise. Also reports whether a retention run holds its lock.",
)
def health_check(db: Session = Depends(get_db)):
    started = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
        lock = db.get(JobLock, RETENTION_LOCK_NAME)
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": str(e)},
        )

    return {
        "status": "healthy",
        "database_latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "retention_run_in_progress": lock is not None,
    }
