"""FastAPI dependencies for database access and the calling actor."""

from dataclasses import dataclass
from typing import Generator

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from app.core.constants import SYSTEM_ACTOR_ID
from app.db.enums import Role
from app.db.session import SessionLocal

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_ROLE_HEADER = "X-Actor-Role"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@dataclass(frozen=True)
class Actor:
    """Caller identity as forwarded by the upstream gateway."""
    user_id: str
    role: Role | None


def get_actor(
    x_actor_id: str | None = Header(None, alias=ACTOR_ID_HEADER),
    x_actor_role: str | None = Header(None, alias=ACTOR_ROLE_HEADER),
) -> Actor:
    """
    Read the acting user from request headers.

    Authentication happens upstream; missing headers mean an anonymous
    customer-level caller recorded as the system actor.

    Raises:
        HTTPException 400: unknown role
    """
    role = None
    if x_actor_role:
        if not Role.has_value(x_actor_role.upper()):
            raise HTTPException(status_code=400, detail=f"Unknown role: {x_actor_role}")
        role = Role(x_actor_role.upper())
    return Actor(user_id=x_actor_id or SYSTEM_ACTOR_ID, role=role)


def require_implementation_lead(actor: Actor) -> None:
    """
    Raises:
        HTTPException 403: caller is not an implementation lead
    """
    if actor.role != Role.IMPLEMENTATION_LEAD:
        raise HTTPException(status_code=403, detail="Implementation lead role required")
