"""Health check utilities for the recovery portal.

Provides health and readiness checks for the database, the Celery broker,
the local upload storage used for document and video files, and the video
retention metadata file.
"""

import json
import os
import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.orm import Session
import redis

from ..config import get_settings
from ..retention.schemas import VideoRecord
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    """Check database connectivity and health.

    Args:
        db: Database session

    Returns:
        ComponentHealth: Database health status
    """
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Database connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except Exception as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database error: {str(e)}"
        )


def check_redis_health() -> ComponentHealth:
    """Check Redis (Celery broker) connectivity.

    The API keeps serving without the broker, only scheduled cleanup stops,
    so a failure is reported as DEGRADED.

    Returns:
        ComponentHealth: Redis health status
    """
    try:
        client = redis.from_url(get_settings().REDIS_URL, decode_responses=True)

        start = time.time()
        client.ping()
        latency_ms = (time.time() - start) * 1000

        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Redis connection OK",
            latency_ms=round(latency_ms, 2)
        )
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"Redis error: {str(e)}"
        )


def check_upload_storage_health(upload_dir: str) -> ComponentHealth:
    """Check that the upload directory exists and is writable."""
    if not os.path.isdir(upload_dir):
        # Created lazily on first upload
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"Upload directory {upload_dir} does not exist yet"
        )

    if not os.access(upload_dir, os.W_OK):
        logger.error(f"Upload directory {upload_dir} is not writable")
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Upload directory {upload_dir} is not writable"
        )

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Upload storage OK"
    )


def check_video_metadata_health(metadata_path: str) -> ComponentHealth:
    """Check that the video retention metadata file can be read.

    An unreadable file or invalid entries report DEGRADED: the tracker reads
    them as missing, so the affected videos are never swept.
    """
    if not os.path.exists(metadata_path):
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="No videos tracked yet"
        )

    start = time.time()
    try:
        with open(metadata_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Video metadata health check failed: {e}")
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"Video metadata unreadable: {e}"
        )
    latency_ms = round((time.time() - start) * 1000, 2)

    videos = data.get("videos") if isinstance(data, dict) else None
    if not isinstance(videos, dict):
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message="Video metadata has no 'videos' mapping",
            latency_ms=latency_ms
        )

    invalid = [
        doc_key for doc_key, raw in videos.items()
        if not _is_valid_record(raw)
    ]
    if invalid:
        return ComponentHealth(
            status=HealthStatus.DEGRADED,
            message=f"{len(invalid)} invalid video metadata entries: {', '.join(sorted(invalid))}",
            latency_ms=latency_ms
        )

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message=f"{len(videos)} videos tracked",
        latency_ms=latency_ms
    )


def _is_valid_record(raw) -> bool:
    try:
        VideoRecord.model_validate(raw)
    except ValidationError:
        return False
    return True


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses.

    Args:
        components: Dictionary of component health statuses

    Returns:
        HealthStatus: Overall system health
    """
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
