"""Video retention module.

Uploaded video evidence is deleted automatically:
- 7 days after upload if the required party (the role opposite the
  uploader) never downloads it
- 3 days after the first download by the required party

This module provides:
- VideoRetentionTracker and module-level helpers over the shared tracker
- A JSON file store for the tracked records
- A Celery task for the daily cleanup sweep
- Admin APIs for status, manual untracking and manual cleanup
"""

from .schemas import (
    RequiredDownloaderType,
    VideoCleanupResult,
    VideoDownloadResult,
    VideoRecord,
    VideoRetentionInfo,
    VideoRetentionStatus,
)
from .service import (
    VIDEO_EXTENSIONS,
    VideoRetentionTracker,
    cleanup_expired_videos,
    get_all_tracked_videos,
    get_video_retention_info,
    get_video_retention_tracker,
    is_video_file,
    record_video_download,
    remove_video_tracking,
    track_video_upload,
)
from .store import VideoMetadataStore

# Tasks and router are imported lazily to avoid pulling in Celery/FastAPI
# Use: from recovery_portal.retention.tasks import cleanup_expired_videos_task

__all__ = [
    "RequiredDownloaderType",
    "VideoCleanupResult",
    "VideoDownloadResult",
    "VideoRecord",
    "VideoRetentionInfo",
    "VideoRetentionStatus",
    "VIDEO_EXTENSIONS",
    "VideoRetentionTracker",
    "VideoMetadataStore",
    "cleanup_expired_videos",
    "get_all_tracked_videos",
    "get_video_retention_info",
    "get_video_retention_tracker",
    "is_video_file",
    "record_video_download",
    "remove_video_tracking",
    "track_video_upload",
]
