"""Celery application and beat schedule.

Start a worker and the scheduler with:
    celery -A memberportal.celery_app worker --loglevel=info
    celery -A memberportal.celery_app beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from .config import get_settings

settings = get_settings()

celery_app = Celery(
    "memberportal",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["memberportal.retention.tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
)

celery_app.conf.beat_schedule = {
    'retention-purge-monthly': {
        'task': 'retention.purge',
        'schedule': crontab(day_of_month=1, hour=2, minute=0),  # 02:00 UTC
        'options': {
            'expires': 3600,  # Task expires after 1 hour if not picked up
        },
    },
}
