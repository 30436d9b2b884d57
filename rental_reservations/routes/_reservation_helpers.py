"""
Internal helper functions for reservation route handlers.

Translate domain errors into HTTP responses and turn query strings into the
typed filters the readers expect.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

import pydantic
from fastapi import HTTPException, Query, status

from rental_reservations.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from rental_reservations.errors import InvalidTransitionError, ReservationError
from rental_reservations.models.enums import ActorRole, BookingStatus, ReservationSource
from rental_reservations.schemas.actors import Actor
from rental_reservations.schemas.reservations import ReservationFilters


def to_http_exception(error: ReservationError) -> HTTPException:
    """
    Map a domain error onto an HTTPException carrying its status code.

    Args:
        error: Error raised by the lifecycle engine or a reader

    Returns:
        HTTPException: Ready to raise from a route handler
    """
    detail: dict[str, object] = {"message": error.message}
    if isinstance(error, InvalidTransitionError):
        detail["current"] = error.current
        detail["required"] = error.required
    return HTTPException(status_code=error.status_code, detail=detail)


def owner_scope(actor: Actor) -> Optional[str]:
    """Owner ID to restrict reads to, or None for staff roles."""
    return actor.id if actor.role == ActorRole.OWNER else None


def get_filters(
    check_in_from: Optional[date] = Query(None, alias="checkInFrom"),
    check_in_to: Optional[date] = Query(None, alias="checkInTo"),
    statuses: list[BookingStatus] = Query([], alias="status"),
    sources: list[ReservationSource] = Query([], alias="source"),
    property_ids: list[str] = Query([], alias="propertyId"),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount", ge=0),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount", ge=0),
    guest_name: Optional[str] = Query(None, alias="guestName"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> ReservationFilters:
    """
    Build ReservationFilters from query parameters.

    Raises:
        HTTPException: 422 if the ranges are inverted
    """
    try:
        return ReservationFilters(
            check_in_from=check_in_from,
            check_in_to=check_in_to,
            statuses=statuses,
            sources=sources,
            property_ids=property_ids,
            min_amount=min_amount,
            max_amount=max_amount,
            guest_name=guest_name,
            page=page,
            limit=limit,
        )
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[err["msg"] for err in e.errors()],
        )
