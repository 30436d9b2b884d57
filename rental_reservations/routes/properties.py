from datetime import date
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from rental_reservations.db.readers.availability import get_calendar
from rental_reservations.db.readers.directory import get_property
from rental_reservations.dependencies import get_actor, get_db_engine
from rental_reservations.errors import NotFoundError, ReservationError, UnauthorizedError
from rental_reservations.routes._reservation_helpers import owner_scope, to_http_exception
from rental_reservations.schemas.actors import Actor
from rental_reservations.schemas.reservations import AvailabilityDayView

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/{property_id}/availability", response_model=list[AvailabilityDayView])
def property_availability(
    property_id: str,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_actor),
) -> list[AvailabilityDayView]:
    """
    Stored calendar days of a property in [start, end).

    Days never booked are absent and read as AVAILABLE.

    Args:
        property_id: Property whose calendar is read
        start: First day (optional)
        end: Exclusive last day (optional)

    Returns:
        list[AvailabilityDayView]: Days ordered by date
    """
    try:
        with db.connect() as conn:
            prop = get_property(conn, property_id)
            if prop is None:
                raise NotFoundError("Property not found", property_id=property_id)
            owner_id = owner_scope(actor)
            if owner_id is not None and prop["owner_id"] != owner_id:
                raise UnauthorizedError(
                    "Actor does not own this property", actor_id=actor.id, property_id=property_id
                )
            return get_calendar(conn, property_id, start=start, end=end)
    except ReservationError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("availability_fetch_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
