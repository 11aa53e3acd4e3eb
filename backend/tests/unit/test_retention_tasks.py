"""Unit tests for the video retention Celery task and schedule."""

import os

from recovery_portal.models import Document
from recovery_portal.retention import tasks
from recovery_portal.retention.schemas import VideoCleanupResult


def add_document(db_session, file_path: str) -> Document:
    document = Document(
        case_id=99,
        organisation_id=7,
        file_name="evidence.mp4",
        file_size=10,
        file_type="video/mp4",
        file_path=file_path,
        uploaded_by="user-1",
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


class TestCleanupExpiredVideosTask:
    """Test retention.cleanup_videos run synchronously."""

    def test_deletes_expired_video_and_document(self, monkeypatch, session_factory, db_session, tracker, clock, video_file):
        path = video_file()
        document = add_document(db_session, path)
        document_id = document.id
        tracker.track_video_upload(document_id, path, "evidence.mp4", "user-1", False, 7, 99)
        clock.advance(days=7, seconds=1)
        monkeypatch.setattr(tasks, "SessionLocal", session_factory)
        monkeypatch.setattr(tasks, "get_video_retention_tracker", lambda: tracker)

        result = tasks.cleanup_expired_videos_task()

        assert result["status"] == "completed"
        assert result["deleted"] == 1
        assert result["errors"] == 0
        assert result["has_errors"] is False
        assert result["duration_seconds"] >= 0
        assert not os.path.exists(path)
        assert tracker.get_all_tracked_videos() == []

        db_session.expire_all()
        assert db_session.query(Document).filter(Document.id == document_id).first() is None

    def test_missing_document_row_still_completes(self, monkeypatch, session_factory, tracker, clock, tmp_path):
        tracker.track_video_upload(555, str(tmp_path / "gone.mp4"), "gone.mp4", "admin-1", True, None, None)
        clock.advance(days=8)
        monkeypatch.setattr(tasks, "SessionLocal", session_factory)
        monkeypatch.setattr(tasks, "get_video_retention_tracker", lambda: tracker)

        result = tasks.cleanup_expired_videos_task()

        assert result["status"] == "completed"
        assert result["deleted"] == 1

    def test_nothing_to_clean(self, monkeypatch, session_factory, tracker):
        monkeypatch.setattr(tasks, "SessionLocal", session_factory)
        monkeypatch.setattr(tasks, "get_video_retention_tracker", lambda: tracker)

        result = tasks.cleanup_expired_videos_task()

        assert result["status"] == "completed"
        assert (result["deleted"], result["errors"]) == (0, 0)

    def test_reports_per_video_errors(self, monkeypatch, session_factory, tracker):
        class PartlyFailingTracker:
            async def cleanup_expired_videos(self, delete_callback):
                return VideoCleanupResult(deleted=2, errors=1)

        monkeypatch.setattr(tasks, "SessionLocal", session_factory)
        monkeypatch.setattr(tasks, "get_video_retention_tracker", lambda: PartlyFailingTracker())

        result = tasks.cleanup_expired_videos_task()

        assert result["status"] == "completed"
        assert result["errors"] == 1
        assert result["has_errors"] is True

    def test_unexpected_failure_is_reported_not_raised(self, monkeypatch, session_factory):
        class BrokenTracker:
            async def cleanup_expired_videos(self, delete_callback):
                raise RuntimeError("disk on fire")

        monkeypatch.setattr(tasks, "SessionLocal", session_factory)
        monkeypatch.setattr(tasks, "get_video_retention_tracker", lambda: BrokenTracker())

        result = tasks.cleanup_expired_videos_task()

        assert result["status"] == "failed"
        assert result["error"] == "disk on fire"
        assert result["deleted"] == 0


class TestBeatSchedule:
    """Test the Celery Beat configuration."""

    def test_daily_cleanup_scheduled(self):
        from recovery_portal.workers.celery_app import celery_app

        entry = celery_app.conf.beat_schedule["video-retention-cleanup-daily"]

        assert entry["task"] == "retention.cleanup_videos"
        assert entry["schedule"].hour == {2}
        assert entry["schedule"].minute == {0}

    def test_task_is_registered_by_name(self):
        from recovery_portal.workers.celery_app import celery_app

        celery_app.loader.import_default_modules()

        assert "retention.cleanup_videos" in celery_app.tasks
