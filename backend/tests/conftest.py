"""Pytest fixtures for the recovery portal.

Provides reusable test fixtures for:
- A controllable UTC clock
- A video retention tracker backed by a temporary metadata file
- A SQLite database session with fresh tables per test
- A FastAPI TestClient wired to the fixtures above

Usage:
    def test_upload(client, tracker, user_headers):
        response = client.post("/api/v1/documents/upload", ..., headers=user_headers)
        assert tracker.get_all_tracked_videos()
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Generator

# Set environment variables BEFORE any imports so module-level settings,
# engine and logging pick them up
_TEST_DIR = tempfile.mkdtemp(prefix="recovery-portal-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TEST_DIR, 'portal.db')}")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TEST_DIR, "uploads"))
os.environ.setdefault("VIDEO_METADATA_FILE", os.path.join(_TEST_DIR, "uploads", "video-metadata.json"))
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from recovery_portal.database import get_db
from recovery_portal.documents.router import get_storage
from recovery_portal.documents.storage import LocalFileStorage
from recovery_portal.main import app
from recovery_portal.models import Base
from recovery_portal.retention.service import VideoRetentionTracker, get_video_retention_tracker
from recovery_portal.retention.store import VideoMetadataStore

T0 = datetime(2025, 3, 3, 9, 0, 0, tzinfo=timezone.utc)

ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
USER_HEADERS = {"X-User-Id": "user-1", "X-User-Role": "user", "X-Organisation-Id": "7"}
OTHER_ORG_USER_HEADERS = {"X-User-Id": "user-2", "X-User-Role": "user", "X-Organisation-Id": "8"}


class FakeClock:
    """Callable clock returning a fixed, manually advanced UTC time."""

    def __init__(self, now: datetime):
        self.start = now
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at T0."""
    return FakeClock(T0)


@pytest.fixture
def admin_headers() -> dict:
    return dict(ADMIN_HEADERS)


@pytest.fixture
def user_headers() -> dict:
    """Headers of a user in organisation 7."""
    return dict(USER_HEADERS)


@pytest.fixture
def other_org_user_headers() -> dict:
    """Headers of a user in organisation 8."""
    return dict(OTHER_ORG_USER_HEADERS)


@pytest.fixture
def metadata_path(tmp_path) -> str:
    """Path of a not-yet-existing metadata file in a not-yet-existing directory."""
    return str(tmp_path / "uploads" / "video-metadata.json")


@pytest.fixture
def store(metadata_path) -> VideoMetadataStore:
    return VideoMetadataStore(metadata_path)


@pytest.fixture
def tracker(store, clock) -> VideoRetentionTracker:
    """Tracker with the standard 7/3 day windows and the fake clock."""
    return VideoRetentionTracker(store, clock=clock)


@pytest.fixture
def video_file(tmp_path):
    """Factory creating a small file on disk and returning its path."""
    def _make(name: str = "evidence.mp4", content: bytes = b"\x00\x00\x00\x18ftypmp42") -> str:
        path = tmp_path / "files" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return str(path)

    return _make


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Session factory over a fresh SQLite database with all tables created."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Database session for a single test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_storage(tmp_path) -> LocalFileStorage:
    """Upload storage in a temporary directory, limited to 1 MB."""
    return LocalFileStorage(str(tmp_path / "uploads"), max_size=1024 * 1024)


@pytest.fixture
def client(db_session, tracker, upload_storage) -> Generator[TestClient, None, None]:
    """TestClient using the test database, tracker and upload storage."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_video_retention_tracker] = lambda: tracker
    app.dependency_overrides[get_storage] = lambda: upload_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
