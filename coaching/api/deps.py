"""
FastAPI dependencies (DB session, clock, caller identity)
"""
from dataclasses import dataclass

from fastapi import Header, HTTPException, status

from coaching.config import get_settings
from coaching.domain.clock import Clock, SystemClock
from coaching.infrastructure.db.session import get_db as _get_db


# Re-export get_db for routers
get_db = _get_db

ROLES = ("coach", "player", "admin")


@dataclass(frozen=True)
class Actor:
    """Identity fact supplied by the authentication gateway"""
    id: str
    role: str


def get_clock() -> Clock:
    return SystemClock(get_settings().TIMEZONE)


def get_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Actor | None:
    """
    Caller identity from gateway headers (X-Actor-Id / X-Actor-Role).

    Anonymous calls get None; a malformed identity is rejected.

    Raises:
        HTTPException(401): role given without id, or unknown role
    """
    if not x_actor_id and not x_actor_role:
        return None
    role = (x_actor_role or "").strip().lower()
    if not x_actor_id or role not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity",
        )
    return Actor(id=x_actor_id.strip(), role=role)


def actor_id(actor: Actor | None) -> str | None:
    return f"{actor.role}:{actor.id}" if actor else None
