"""Video retention service.

Uploaded video evidence is kept only until the other side of the case has
seen it:

- A video uploaded by an admin must be downloaded by a user, and vice versa
  (the "required party").
- Without a qualifying download the video is deleted 7 days after upload.
- After the first qualifying download the video is deleted 3 days later.

Expiry is evaluated lazily: it is a predicate over the stored timestamps,
checked when retention info is requested or when the cleanup sweep runs.
Nothing here owns a timer; the sweep is scheduled by ``retention.tasks``.
"""

import logging
import math
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Awaitable, Callable, List, Optional

from ..config import get_settings
from ..observability.metrics import (
    videos_tracked_total,
    video_required_downloads_total,
    videos_deleted_total,
    video_cleanup_errors_total,
    videos_tracked,
)
from .schemas import (
    RequiredDownloaderType,
    VideoCleanupResult,
    VideoDownloadResult,
    VideoRecord,
    VideoRetentionInfo,
    VideoRetentionStatus,
)
from .store import VideoMetadataStore

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({'.mp4', '.webm', '.mov', '.avi', '.mkv', '.m4v', '.wmv'})

RETENTION_DAYS_NO_DOWNLOAD = 7
RETENTION_DAYS_AFTER_DOWNLOAD = 3  # 72 hours

SECONDS_PER_DAY = 24 * 60 * 60

DeleteDocumentCallback = Callable[[int], Awaitable[None]]


def is_video_file(file_name: str) -> bool:
    """Check whether a filename has a video extension (case-insensitive).

    Example:
        >>> is_video_file('statement.MP4')
        True
        >>> is_video_file('statement.pdf')
        False
    """
    _, ext = os.path.splitext(file_name)
    return ext.lower() in VIDEO_EXTENSIONS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VideoRetentionTracker:
    """Tracks uploaded videos from upload through qualifying download to deletion.

    Every public operation loads the full store, applies its change and writes
    the store back. Synchronous read-modify-write sections run under the
    store lock; the lock is never held across an ``await``.
    """

    def __init__(
        self,
        store: VideoMetadataStore,
        retention_days_no_download: int = RETENTION_DAYS_NO_DOWNLOAD,
        retention_days_after_download: int = RETENTION_DAYS_AFTER_DOWNLOAD,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the tracker.

        Args:
            store: Metadata store holding the tracked records
            retention_days_no_download: Days to keep a video nobody required has downloaded
            retention_days_after_download: Days to keep a video after the qualifying download
            clock: Returns the current aware UTC time (injectable for tests)
        """
        self.store = store
        self.retention_no_download = timedelta(days=retention_days_no_download)
        self.retention_after_download = timedelta(days=retention_days_after_download)
        self.clock = clock or _utcnow

    def track_video_upload(
        self,
        document_id: int,
        file_path: str,
        file_name: str,
        uploaded_by_user_id: str,
        uploaded_by_admin: bool,
        organisation_id: Optional[int] = None,
        case_id: Optional[int] = None,
    ) -> None:
        """Start tracking an uploaded video.

        An existing record for the same document id is replaced, which also
        restarts its retention window.
        """
        required = RequiredDownloaderType.opposite_of(uploaded_by_admin)
        doc_key = str(document_id)

        with self.store.lock:
            videos = self.store.load()
            if doc_key in videos:
                logger.warning(
                    f"Replacing existing video tracking for document {document_id}",
                    extra={"document_id": document_id}
                )

            videos[doc_key] = VideoRecord(
                file_path=file_path,
                file_name=file_name,
                uploaded_at=self.clock(),
                uploaded_by_user_id=uploaded_by_user_id,
                uploaded_by_admin=uploaded_by_admin,
                document_id=document_id,
                organisation_id=organisation_id,
                case_id=case_id,
                downloaded_by_required_party=False,
                downloaded_at=None,
                required_downloader_type=required,
            )
            self.store.save(videos)
            videos_tracked.set(len(videos))

        videos_tracked_total.labels(required_downloader=required.value).inc()
        logger.info(
            f"Tracked video upload: {file_name} (doc {document_id}), requires {required.value} download",
            extra={"document_id": document_id, "org_id": organisation_id, "case_id": case_id}
        )

    def record_video_download(self, document_id: int, downloaded_by_admin: bool) -> VideoDownloadResult:
        """Record a download and start the retention countdown if it qualifies.

        Only the first download by the required party counts. Downloads of
        untracked documents, by the uploader's own role, or after the
        countdown has started change nothing.
        """
        doc_key = str(document_id)

        with self.store.lock:
            videos = self.store.load()
            video = videos.get(doc_key)

            if video is None or video.downloaded_by_required_party:
                return VideoDownloadResult()

            if not video.required_downloader_type.matches(downloaded_by_admin):
                return VideoDownloadResult()

            videos[doc_key] = video.model_copy(update={
                "downloaded_by_required_party": True,
                "downloaded_at": self.clock(),
            })
            self.store.save(videos)

        video_required_downloads_total.inc()
        logger.info(
            f"Video {document_id} downloaded by required party ({video.required_downloader_type.value}). "
            f"Retention countdown started: {self.retention_after_download.days} days.",
            extra={"document_id": document_id}
        )
        return VideoDownloadResult(was_required_download=True, retention_started=True)

    def expires_at(self, video: VideoRecord) -> datetime:
        """Instant at which a record becomes eligible for deletion."""
        if video.downloaded_by_required_party and video.downloaded_at is not None:
            return video.downloaded_at + self.retention_after_download
        return video.uploaded_at + self.retention_no_download

    def get_video_retention_info(self, document_id: int) -> VideoRetentionInfo:
        """Compute the retention status of a document. Never modifies the store.

        days_remaining is rounded up to whole days, so a video expiring in 30
        minutes reports 1 day until the expiry instant has passed.
        """
        video = self.store.load().get(str(document_id))
        if video is None:
            return VideoRetentionInfo(
                is_tracked=False,
                days_remaining=None,
                status=VideoRetentionStatus.NOT_TRACKED,
            )

        remaining = (self.expires_at(video) - self.clock()).total_seconds()
        days_remaining = max(0, math.ceil(remaining / SECONDS_PER_DAY))

        if video.downloaded_by_required_party:
            status = VideoRetentionStatus.RETENTION_COUNTDOWN
        else:
            status = VideoRetentionStatus.AWAITING_DOWNLOAD

        return VideoRetentionInfo(
            is_tracked=True,
            days_remaining=days_remaining,
            status=status,
            required_downloader_type=video.required_downloader_type,
        )

    def remove_video_tracking(self, document_id: int) -> None:
        """Stop tracking a document. Unknown ids are ignored.

        Also discards a stored entry for the document that failed validation.
        """
        doc_key = str(document_id)

        with self.store.lock:
            videos = self.store.load()
            if videos.pop(doc_key, None) is None and not self.store.discard_unparsed(doc_key):
                return
            self.store.save(videos)
            videos_tracked.set(len(videos))

        logger.info(
            f"Removed tracking for document {document_id}",
            extra={"document_id": document_id}
        )

    def get_all_tracked_videos(self) -> List[VideoRecord]:
        """Snapshot of every tracked record, in no particular order."""
        return list(self.store.load().values())

    async def cleanup_expired_videos(self, delete_callback: DeleteDocumentCallback) -> VideoCleanupResult:
        """Delete every expired video together with its document record.

        Candidates are snapshotted before any deletion starts. Each one is
        processed in turn: the file is removed if it still exists, then
        ``delete_callback(document_id)`` is awaited, then the record is
        dropped. A failure at any step is logged and counted, and the record
        stays tracked so the next sweep retries it.

        Args:
            delete_callback: Async callable deleting the owning document record

        Returns:
            VideoCleanupResult with deleted and error counts
        """
        now = self.clock()
        videos = self.store.load()

        expired = {
            doc_key: video
            for doc_key, video in videos.items()
            if now >= self.expires_at(video)
        }

        if expired:
            logger.info(
                f"Video cleanup found {len(expired)} expired of {len(videos)} tracked videos"
            )

        result = VideoCleanupResult()
        removed: List[str] = []

        for doc_key, video in expired.items():
            try:
                if os.path.exists(video.file_path):
                    os.remove(video.file_path)
                    logger.info(
                        f"Deleted expired video file: {video.file_name}",
                        extra={"document_id": video.document_id}
                    )
                else:
                    logger.info(
                        f"Expired video file already gone: {video.file_path}",
                        extra={"document_id": video.document_id}
                    )

                await delete_callback(video.document_id)

                removed.append(doc_key)
                result.deleted += 1

            except Exception as e:
                logger.error(
                    f"Error deleting video {doc_key}",
                    exc_info=True,
                    extra={"document_id": video.document_id, "error": str(e)}
                )
                result.errors += 1

        remaining = len(videos)
        if removed:
            remaining = self._forget(removed, expired)

        videos_deleted_total.inc(result.deleted)
        video_cleanup_errors_total.inc(result.errors)
        videos_tracked.set(remaining)

        return result

    def _forget(self, doc_keys: List[str], snapshot: dict) -> int:
        """Drop swept records, keeping any that were re-tracked during the sweep.

        Returns the number of records still tracked.
        """
        with self.store.lock:
            current = self.store.load()
            for doc_key in doc_keys:
                latest = current.get(doc_key)
                if latest is not None and latest.uploaded_at == snapshot[doc_key].uploaded_at:
                    del current[doc_key]
            self.store.save(current)
            return len(current)


@lru_cache()
def get_video_retention_tracker() -> VideoRetentionTracker:
    """Get the process-wide tracker configured from settings.

    Call get_video_retention_tracker.cache_clear() after changing settings.
    """
    settings = get_settings()
    return VideoRetentionTracker(
        store=VideoMetadataStore(settings.VIDEO_METADATA_FILE),
        retention_days_no_download=settings.VIDEO_RETENTION_DAYS_NO_DOWNLOAD,
        retention_days_after_download=settings.VIDEO_RETENTION_DAYS_AFTER_DOWNLOAD,
    )


def track_video_upload(
    document_id: int,
    file_path: str,
    file_name: str,
    uploaded_by_user_id: str,
    uploaded_by_admin: bool,
    organisation_id: Optional[int] = None,
    case_id: Optional[int] = None,
) -> None:
    get_video_retention_tracker().track_video_upload(
        document_id, file_path, file_name, uploaded_by_user_id,
        uploaded_by_admin, organisation_id, case_id,
    )


def record_video_download(document_id: int, downloaded_by_admin: bool) -> VideoDownloadResult:
    return get_video_retention_tracker().record_video_download(document_id, downloaded_by_admin)


def get_video_retention_info(document_id: int) -> VideoRetentionInfo:
    return get_video_retention_tracker().get_video_retention_info(document_id)


def remove_video_tracking(document_id: int) -> None:
    get_video_retention_tracker().remove_video_tracking(document_id)


def get_all_tracked_videos() -> List[VideoRecord]:
    return get_video_retention_tracker().get_all_tracked_videos()


async def cleanup_expired_videos(delete_callback: DeleteDocumentCallback) -> VideoCleanupResult:
    return await get_video_retention_tracker().cleanup_expired_videos(delete_callback)
