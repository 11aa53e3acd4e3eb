"""Prometheus metrics for the recovery portal.

Defines operational metrics for document handling and video retention.
"""

from prometheus_client import Counter, Gauge

# Document handling metrics
documents_uploaded_total = Counter(
    "recovery_portal_documents_uploaded_total",
    "Total number of documents uploaded",
    ["kind"]  # kind: video|document
)

# Video retention metrics
videos_tracked_total = Counter(
    "recovery_portal_videos_tracked_total",
    "Total video uploads registered for retention tracking",
    ["required_downloader"]  # admin|user
)

video_required_downloads_total = Counter(
    "recovery_portal_video_required_downloads_total",
    "Total qualifying downloads that started a retention countdown",
)

videos_deleted_total = Counter(
    "recovery_portal_videos_deleted_total",
    "Total expired videos deleted by the cleanup sweep",
)

video_cleanup_errors_total = Counter(
    "recovery_portal_video_cleanup_errors_total",
    "Total per-video failures during the cleanup sweep",
)

videos_tracked = Gauge(
    "recovery_portal_videos_tracked_current",
    "Number of videos currently tracked for retention (as of the last sweep)",
)
