from datetime import date
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.engine import Engine

from rental_reservations.db.readers.directory import find_available_properties, get_property
from rental_reservations.db.readers.reservations import get_calendar_events, list_reservations
from rental_reservations.db.readers.stats import get_reservation_stats, get_source_breakdown
from rental_reservations.dependencies import get_actor, get_db_engine, get_lifecycle
from rental_reservations.errors import ReservationError, UnauthorizedError
from rental_reservations.routes._reservation_helpers import (
    get_filters,
    owner_scope,
    to_http_exception,
)
from rental_reservations.schemas.actors import Actor
from rental_reservations.schemas.reservations import (
    AvailableProperty,
    CalendarEvent,
    ReservationCreatePayload,
    ReservationFilters,
    ReservationPage,
    ReservationStats,
    ReservationUpdatePayload,
    ReservationView,
    SourceCount,
    StatusUpdatePayload,
)
from rental_reservations.services.lifecycle import ReservationLifecycle

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReservationView)
def create_reservation(
    payload: ReservationCreatePayload,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_actor),
) -> ReservationView:
    """
    Book a property for a guest.

    Args:
        payload: Property, guest, dates and optional status overrides
        lifecycle: Reservation lifecycle engine
        actor: Calling user

    Returns:
        ReservationView: The new reservation with its computed total
    """
    try:
        return lifecycle.create(payload, actor)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("", response_model=ReservationPage)
def list_reservations_endpoint(
    filters: ReservationFilters = Depends(get_filters),
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> ReservationPage:
    """List reservations matching the filters, newest first."""
    try:
        with db.connect() as conn:
            return list_reservations(conn, filters, owner_id=owner_scope(actor))
    except Exception as e:
        logger.exception("reservation_list_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/stats", response_model=ReservationStats)
def reservation_stats(
    filters: ReservationFilters = Depends(get_filters),
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> ReservationStats:
    """Per-status counts, revenue and occupancy over the filtered reservations."""
    try:
        with db.connect() as conn:
            return get_reservation_stats(conn, filters, owner_id=owner_scope(actor))
    except Exception as e:
        logger.exception("reservation_stats_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/sources", response_model=list[SourceCount])
def reservation_sources(
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> list[SourceCount]:
    try:
        with db.connect() as conn:
            return get_source_breakdown(conn, owner_id=owner_scope(actor))
    except Exception as e:
        logger.exception("reservation_sources_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/calendar", response_model=list[CalendarEvent])
def reservation_calendar(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> list[CalendarEvent]:
    """
    Calendar events for reservations touching [start, end].

    Args:
        property_id: Restrict to one property (optional)
        start: Window start (optional, applied together with end)
        end: Window end (optional, applied together with start)
    """
    owner_id = owner_scope(actor)
    try:
        with db.connect() as conn:
            if owner_id is not None and property_id:
                prop = get_property(conn, property_id)
                if prop is not None and prop["owner_id"] != owner_id:
                    raise UnauthorizedError(
                        "Actor does not own this property", actor_id=actor.id, property_id=property_id
                    )
            return get_calendar_events(
                conn, property_id=property_id, start=start, end=end, owner_id=owner_id
            )
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_calendar_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/available-properties", response_model=list[AvailableProperty])
def available_properties(
    start: Optional[date] = Query(None, alias="startDate"),
    end: Optional[date] = Query(None, alias="endDate"),
    guests: Optional[int] = Query(None, ge=1),
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> list[AvailableProperty]:
    """Active properties with enough capacity and no active booking in [startDate, endDate)."""
    if start and end and end <= start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="endDate must be after startDate",
        )
    try:
        with db.connect() as conn:
            return find_available_properties(conn, start=start, end=end, guests=guests)
    except Exception as e:
        logger.exception("available_properties_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{reservation_id}", response_model=ReservationView)
def get_reservation(
    reservation_id: str,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_actor),
) -> ReservationView:
    try:
        return lifecycle.get(reservation_id, actor)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_fetch_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{reservation_id}", response_model=ReservationView)
def update_reservation_endpoint(
    reservation_id: str,
    payload: ReservationUpdatePayload,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_actor),
) -> ReservationView:
    """
    Patch a reservation. Changing the property or dates re-runs the conflict
    check and recomputes the total.
    """
    try:
        return lifecycle.update(reservation_id, payload, actor)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_update_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reservation_endpoint(
    reservation_id: str,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_actor),
) -> Response:
    """Delete a reservation and release its nights."""
    try:
        lifecycle.delete(reservation_id, actor)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_delete_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{reservation_id}/status", response_model=ReservationView)
def update_reservation_status(
    reservation_id: str,
    payload: StatusUpdatePayload,
    lifecycle: ReservationLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_actor),
) -> ReservationView:
    """Overwrite status, paymentStatus and/or guestStatus. The calendar is left untouched."""
    try:
        return lifecycle.update_status(reservation_id, payload, actor)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("reservation_status_update_failed", reservation_id=reservation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


def _transition_route(path: str, operation: str) -> None:
    """Register POST /{reservation_id}/<path> for a guarded lifecycle transition."""

    def endpoint(
        reservation_id: str,
        lifecycle: ReservationLifecycle = Depends(get_lifecycle),
        actor: Actor = Depends(get_actor),
    ) -> ReservationView:
        try:
            return getattr(lifecycle, operation)(reservation_id, actor)
        except ReservationError as e:
            raise to_http_exception(e)
        except Exception as e:
            logger.exception(
                "reservation_transition_failed",
                operation=operation,
                reservation_id=reservation_id,
                error=str(e),
            )
            raise HTTPException(status_code=500, detail="Internal server error")

    endpoint.__name__ = f"{operation}_reservation"
    router.add_api_route(
        f"/{{reservation_id}}/{path}",
        endpoint,
        methods=["POST"],
        response_model=ReservationView,
        name=endpoint.__name__,
    )


for _path, _operation in [
    ("confirm", "confirm"),
    ("cancel", "cancel"),
    ("check-in", "check_in"),
    ("check-out", "check_out"),
    ("no-show", "mark_no_show"),
]:
    _transition_route(_path, _operation)
