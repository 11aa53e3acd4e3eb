"""Celery tasks for video retention cleanup.

Tasks:
- cleanup_expired_videos_task: Daily sweep, scheduled in workers.celery_app
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from celery import shared_task

from ..database import SessionLocal
from ..documents.service import make_delete_document_callback
from ..observability.context import bind_request_id, new_request_id, reset_context
from .service import get_video_retention_tracker

logger = logging.getLogger(__name__)


@shared_task(name="retention.cleanup_videos", bind=True)
def cleanup_expired_videos_task(self) -> Dict[str, Any]:
    """Delete expired videos and their document records.

    The task always completes: per-video failures are counted by the sweep
    and retried on the next run, and any other failure is reported in the
    result instead of raised.

    Returns:
        Dict with cleanup statistics:
        - status: "completed" or "failed"
        - deleted: Number of videos deleted
        - errors: Number of videos that failed and stay tracked
        - job_started_at / job_completed_at / duration_seconds
    """
    reset_context()
    bind_request_id(f"task-{self.request.id}" if self.request.id else new_request_id("task"))
    start_time = datetime.now(timezone.utc)
    logger.info("Video retention cleanup task started")

    db = SessionLocal()
    try:
        tracker = get_video_retention_tracker()
        result = asyncio.run(tracker.cleanup_expired_videos(make_delete_document_callback(db)))

        end_time = datetime.now(timezone.utc)
        stats = {
            'status': 'completed',
            'job_started_at': start_time.isoformat(),
            'job_completed_at': end_time.isoformat(),
            'duration_seconds': (end_time - start_time).total_seconds(),
            'deleted': result.deleted,
            'errors': result.errors,
            'has_errors': result.has_errors,
        }

        if result.has_errors:
            logger.error(
                f"Video retention cleanup completed with {result.errors} errors",
                extra={"task_id": self.request.id}
            )
        else:
            logger.info(
                f"Video retention cleanup completed: {result.deleted} videos deleted",
                extra={"task_id": self.request.id}
            )

        return stats

    except Exception as e:
        logger.error(
            "Video retention cleanup task failed",
            exc_info=True,
            extra={"task_id": self.request.id, "error": str(e)}
        )

        # Return error status but don't raise (allow task to complete)
        return {
            'status': 'failed',
            'error': str(e),
            'deleted': 0,
            'errors': 0,
        }

    finally:
        db.close()
