"""Celery application and Beat schedule.

Run a worker with Beat embedded:

    celery -A recovery_portal.workers.celery_app worker --beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from ..config import get_settings
from ..observability.logging_config import configure_logging

settings = get_settings()

celery_app = Celery(
    "recovery_portal",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["recovery_portal.retention.tasks"],
)

celery_app.conf.update(
    timezone="UTC",
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
)

celery_app.conf.beat_schedule = {
    "video-retention-cleanup-daily": {
        "task": "retention.cleanup_videos",
        "schedule": crontab(hour=settings.VIDEO_CLEANUP_HOUR, minute=0),
        "options": {
            "expires": 3600,  # Task expires after 1 hour if not picked up
        },
    },
}


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's JSON logging in workers instead of Celery's default."""
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
