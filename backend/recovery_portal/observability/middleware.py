"""Request logging middleware.

Each request gets a correlation id (taken from ``X-Request-ID`` when the
gateway sends one) and produces one summary log line when it finishes.
"""

import logging
import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import REQUEST_ID_HEADER, bind_request_id, new_request_id, reset_context
from .logging_config import get_logger

logger = get_logger(__name__)

# Probe endpoints hit every few seconds by the orchestrator
_QUIET_PATHS = frozenset({"/health", "/ready", "/metrics"})


def _summary(request: Request, started: float) -> Dict[str, Any]:
    """Log fields describing a finished request.

    The acting user is read from ``request.state.actor``, set by
    ``dependencies.get_current_actor`` for routes that require one.
    """
    fields: Dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
    }
    actor = getattr(request.state, "actor", None)
    if actor is not None:
        fields["user_id"] = actor.user_id
        fields["role"] = actor.role.value
        fields["org_id"] = actor.organisation_id
    return fields


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation id per request and log a summary line."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        reset_context()
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        bind_request_id(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} failed",
                exc_info=True,
                extra=_summary(request, started)
            )
            raise

        fields = _summary(request, started)
        fields["status_code"] = response.status_code
        level = logging.DEBUG if request.url.path in _QUIET_PATHS else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} -> {response.status_code}", extra=fields)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
