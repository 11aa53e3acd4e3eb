"""Global FastAPI dependencies for the acting user.

Authentication happens upstream: the gateway in front of this service
verifies the session and forwards the caller's identity in headers:

- X-User-Id: user id (string)
- X-User-Role: "admin" or "user"
- X-Organisation-Id: organisation id (integer, optional for admins)

These dependencies only parse and validate those headers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from .observability.context import bind_actor


class ActorRole(str, Enum):
    """Portal roles. Admins are staff at the recovery firm, users are client organisations."""
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class Actor:
    """Identity of the user making the request."""
    user_id: str
    role: ActorRole
    organisation_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


async def get_current_actor(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_organisation_id: Optional[int] = Header(default=None),
) -> Actor:
    """Build the acting user from gateway headers.

    The actor is also bound to the log context and kept on
    ``request.state.actor`` for the request summary log line.

    Raises:
        HTTPException 401: If the identity headers are missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )

    try:
        role = ActorRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown user role '{x_user_role}'",
        )

    actor = Actor(user_id=x_user_id, role=role, organisation_id=x_organisation_id)
    request.state.actor = actor
    bind_actor(actor.user_id, actor.organisation_id)
    return actor


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Allow only admins.

    Raises:
        HTTPException 403: If the acting user is not an admin
    """
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return actor
