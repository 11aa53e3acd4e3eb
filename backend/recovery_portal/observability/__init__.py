"""Observability module for the recovery portal.

Provides structured logging, metrics and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    documents_uploaded_total,
    videos_tracked_total,
    video_required_downloads_total,
    videos_deleted_total,
    video_cleanup_errors_total,
    videos_tracked,
)
from .context import bind_actor, bind_request_id, current_request_id, new_request_id
from .health import HealthStatus, ComponentHealth
from .middleware import RequestContextMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "documents_uploaded_total",
    "videos_tracked_total",
    "video_required_downloads_total",
    "videos_deleted_total",
    "video_cleanup_errors_total",
    "videos_tracked",
    # Log context
    "bind_actor",
    "bind_request_id",
    "current_request_id",
    "new_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestContextMiddleware",
]
