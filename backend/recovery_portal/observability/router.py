"""Probe and metrics endpoints for the portal.

- /health: per-component report (database, broker, upload storage, video
  retention metadata). 503 only when a component is unhealthy.
- /ready: database reachable and upload storage writable.
- /metrics: Prometheus exposition.
"""

from typing import Dict

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..database import get_db
from ..documents.router import get_storage
from ..documents.storage import LocalFileStorage
from ..retention.service import VideoRetentionTracker, get_video_retention_tracker
from .health import (
    ComponentHealth,
    HealthStatus,
    check_database_health,
    check_redis_health,
    check_upload_storage_health,
    check_video_metadata_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


def _report(components: Dict[str, ComponentHealth]) -> Dict[str, dict]:
    return {
        name: {
            "status": component.status.value,
            "message": component.message,
            "latency_ms": component.latency_ms,
        }
        for name, component in components.items()
    }


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/health", summary="Component health report")
def health_check(
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
    tracker: VideoRetentionTracker = Depends(get_video_retention_tracker),
) -> JSONResponse:
    """Report the health of every component the portal depends on.

    A broken broker or metadata file is DEGRADED: uploads and downloads keep
    working, only video retention is affected.
    """
    components = {
        "database": check_database_health(db),
        "redis": check_redis_health(),
        "upload_storage": check_upload_storage_health(storage.base_dir),
        "video_metadata": check_video_metadata_health(tracker.store.path),
    }
    overall = get_overall_health(components)

    return JSONResponse(
        content={"status": overall.value, "components": _report(components)},
        status_code=503 if overall == HealthStatus.UNHEALTHY else 200,
    )


@router.get("/ready", summary="Readiness probe")
def readiness_check(
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
) -> JSONResponse:
    """Ready once documents can be recorded and stored.

    A missing upload directory does not block readiness; it is created on
    the first upload.
    """
    components = {
        "database": check_database_health(db),
        "upload_storage": check_upload_storage_health(storage.base_dir),
    }
    ready = all(c.status != HealthStatus.UNHEALTHY for c in components.values())

    return JSONResponse(
        content={"status": "ready" if ready else "not_ready", "components": _report(components)},
        status_code=200 if ready else 503,
    )
