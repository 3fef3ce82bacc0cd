"""Celery tasks for data retention.

Tasks:
- retention_purge_task: Monthly job (day 1, 02:00 UTC), see celery_app.py
"""

import logging
from celery import shared_task
from typing import Dict, Any

from ..audit.service import log_audit_event
from ..database import SessionLocal
from ..errors import RetentionRunInProgressError
from ..observability.request_id import generate_request_id, set_request_id
from .service import run_retention_purge

logger = logging.getLogger(__name__)

PURGE_EXECUTED_EVENT = "retention.purge.executed"


@shared_task(name="retention.purge", bind=True)
def retention_purge_task(self) -> Dict[str, Any]:
    """Execute one locked retention run.

    The task is idempotent: running it twice in succession finds nothing
    more to change. If another run holds the lock the task reports
    ``skipped`` instead of waiting.

    Returns:
        Dict with:
        - status: completed, skipped or failed
        - stats: camelCase PurgeStats (completed runs only)
        - error: message (skipped/failed runs only)
    """
    set_request_id(generate_request_id("retention"))
    logger.info("Retention purge task started")

    db = SessionLocal()
    try:
        stats = run_retention_purge(db)
        stats_payload = stats.model_dump(by_alias=True)

        log_audit_event(
            db=db,
            event=PURGE_EXECUTED_EVENT,
            details={"trigger": "scheduled", "stats": stats_payload},
        )

        result = {
            'status': 'completed',
            'stats': stats_payload,
            'total_changes': stats.total_changes,
            'has_errors': stats.has_errors,
        }
        logger.info(
            "Retention purge task completed",
            extra={"stats": stats_payload},
        )
        return result

    except RetentionRunInProgressError as e:
        logger.warning(f"Retention purge task skipped: {e.message}")
        return {
            'status': 'skipped',
            'error': e.message,
        }

    except Exception as e:
        logger.error(
            "Retention purge task failed",
            exc_info=True,
        )

        # Report failure in the result; the next scheduled run retries
        return {
            'status': 'failed',
            'error': str(e),
        }

    finally:
        db.close()
        set_request_id(None)
