"""Log correlation context.

Every HTTP request and every Celery task run gets a correlation id. HTTP
requests also carry the acting portal user once the identity headers have
been parsed, so a log line about a video upload or download says who did it.
``logging_config.ContextFilter`` copies both onto each log record.
"""

import uuid
from contextvars import ContextVar
from typing import Dict, Optional, Union

REQUEST_ID_HEADER = "X-Request-ID"

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_actor_fields: ContextVar[Optional[Dict[str, Union[str, int]]]] = ContextVar("actor_fields", default=None)


def new_request_id(prefix: str = "req") -> str:
    """Short random id, e.g. ``req-3f2a9c1e0b7d4e55`` or ``task-...``."""
    return f"{prefix}-{uuid.uuid4().hex[:16]}"


def bind_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def current_request_id() -> Optional[str]:
    return _request_id.get()


def bind_actor(user_id: str, organisation_id: Optional[int] = None) -> None:
    """Attach the acting user to log lines written later in this context."""
    fields: Dict[str, Union[str, int]] = {"user_id": user_id}
    if organisation_id is not None:
        fields["org_id"] = organisation_id
    _actor_fields.set(fields)


def actor_fields() -> Dict[str, Union[str, int]]:
    return dict(_actor_fields.get() or {})


def reset_context() -> None:
    """Forget the request id and actor, e.g. at the start of a new request."""
    _request_id.set(None)
    _actor_fields.set(None)
