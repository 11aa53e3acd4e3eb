"""FastAPI router for video retention management endpoints.

Provides admin APIs for:
- Listing all tracked videos
- Viewing the retention status of a document
- Manually removing a video from tracking
- Manually triggering the cleanup sweep

All endpoints require the admin role.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status

from ..dependencies import Actor, require_admin
from .schemas import VideoRecord, VideoRetentionInfo
from .service import VideoRetentionTracker, get_video_retention_tracker
from .tasks import cleanup_expired_videos_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/retention", tags=["retention"])


@router.get("/videos", response_model=List[VideoRecord])
def list_tracked_videos(
    actor: Actor = Depends(require_admin),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> List[VideoRecord]:
    """List every video currently tracked for retention."""
    return tracker.get_all_tracked_videos()


@router.get("/videos/{document_id}", response_model=VideoRetentionInfo)
def get_video_retention(
    document_id: int,
    actor: Actor = Depends(require_admin),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> VideoRetentionInfo:
    """Get the retention status of a document.

    Untracked documents return status "not_tracked" rather than 404.
    """
    return tracker.get_video_retention_info(document_id)


@router.delete("/videos/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_video_tracking(
    document_id: int,
    actor: Actor = Depends(require_admin),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> None:
    """Stop tracking a video without deleting its file or document."""
    tracker.remove_video_tracking(document_id)

    logger.info(
        f"Video tracking for document {document_id} removed manually",
        extra={"document_id": document_id, "user_id": actor.user_id}
    )


@router.post("/videos/cleanup", response_model=Dict[str, Any], status_code=status.HTTP_202_ACCEPTED)
def trigger_video_cleanup(
    actor: Actor = Depends(require_admin),
) -> Dict[str, Any]:
    """Enqueue the expired-video cleanup sweep now.

    Runs the same Celery task as the daily schedule. The endpoint returns
    immediately with the task ID; the sweep statistics are the task result.

    Returns:
        Dict with:
        - status: "enqueued"
        - task_id: Celery task ID for status checking
    """
    task = cleanup_expired_videos_task.delay()

    logger.info(
        "Manual video cleanup triggered",
        extra={"user_id": actor.user_id, "task_id": task.id}
    )

    return {
        "status": "enqueued",
        "task_id": task.id,
    }
