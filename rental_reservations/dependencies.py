"""
FastAPI dependency injection providers.

Routes receive the engine, the lifecycle engine and the calling actor through
these providers. Tests override them with app.dependency_overrides to run the
API against an in-memory database.
"""

from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.engine import Engine

from rental_reservations.db.engine import engine
from rental_reservations.models.enums import ActorRole
from rental_reservations.schemas.actors import Actor
from rental_reservations.services.audit import SqlAuditRecorder
from rental_reservations.services.lifecycle import ReservationLifecycle


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine


def get_lifecycle(db: Engine = Depends(get_db_engine)) -> ReservationLifecycle:
    """Lifecycle engine bound to the request's database, auditing to the same database."""
    return ReservationLifecycle(db, SqlAuditRecorder(db))


def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    """
    Resolve the calling actor from headers set by the authentication gateway.

    Raises:
        HTTPException: 401 if no actor ID is present, 400 for an unknown role
    """
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Id header is required",
        )

    if x_actor_role is None:
        return Actor(id=x_actor_id)

    try:
        role = ActorRole(x_actor_role.upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown actor role: {x_actor_role}",
        )
    return Actor(id=x_actor_id, role=role)
