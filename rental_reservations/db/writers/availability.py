"""
Calendar Store writes.

Each calendar day keeps a reference count of the reservations holding it.
Booking a range increments the count of every night, releasing decrements
it, and a day only reads AVAILABLE once nobody holds it any more. Releasing
one reservation therefore never frees a night another reservation still
covers.
"""

from collections import Counter
from datetime import date

import structlog
from sqlalchemy import case, select, update
from sqlalchemy.engine import Connection

from rental_reservations.db.writers._upsert import dialect_insert
from rental_reservations.metrics import calendar_days_marked
from rental_reservations.models.availability import AvailabilityDay
from rental_reservations.models.enums import AvailabilityStatus
from rental_reservations.models.reservations import Reservation
from rental_reservations.utils.datetime import iter_nights, utc_now

logger = structlog.get_logger(__name__)


def mark_range(
    conn: Connection,
    property_id: str,
    check_in: date,
    check_out: date,
    status: AvailabilityStatus,
) -> int:
    """
    Book or release every night in [check_in, check_out) for a property.

    Args:
        conn: Active database connection (within the lifecycle transaction)
        property_id: Property whose calendar is changed
        check_in: First night of the range
        check_out: Exclusive end of the range
        status: BOOKED to take a hold on each night, AVAILABLE to drop one

    Returns:
        int: Number of calendar days touched
    """
    nights = list(iter_nights(check_in, check_out))
    if not nights:
        return 0

    now = utc_now()
    booking = status == AvailabilityStatus.BOOKED
    stmt = dialect_insert(conn, AvailabilityDay).values(
        [
            {
                "property_id": property_id,
                "date": night,
                "status": status.value,
                "booked_count": 1 if booking else 0,
                "updated_at": now,
            }
            for night in nights
        ]
    )

    current = AvailabilityDay.booked_count
    if booking:
        set_dict = {
            "booked_count": current + 1,
            "status": AvailabilityStatus.BOOKED.value,
            "updated_at": stmt.excluded.updated_at,
        }
    else:
        set_dict = {
            "booked_count": case((current > 0, current - 1), else_=0),
            "status": case(
                (current > 1, AvailabilityStatus.BOOKED.value),
                else_=AvailabilityStatus.AVAILABLE.value,
            ),
            "updated_at": stmt.excluded.updated_at,
        }

    stmt = stmt.on_conflict_do_update(
        index_elements=["property_id", "date"],
        set_=set_dict,
    )
    conn.execute(stmt)

    calendar_days_marked.labels(status=status.value).inc(len(nights))
    logger.debug(
        "calendar_range_marked",
        property_id=property_id,
        check_in=check_in.isoformat(),
        check_out=check_out.isoformat(),
        status=status.value,
        days=len(nights),
    )
    return len(nights)


def rebuild_calendar(conn: Connection, property_id: str) -> int:
    """
    Recompute a property's calendar from the reservations that hold it.

    Every existing day is reset to AVAILABLE, then each night covered by a
    reservation with calendar_held set is counted again. Used to repair drift
    left by direct status overwrites.

    Args:
        conn: Active database connection (within transaction)
        property_id: Property whose calendar is rebuilt

    Returns:
        int: Number of days that end up BOOKED
    """
    now = utc_now()

    conn.execute(
        update(AvailabilityDay)
        .where(AvailabilityDay.property_id == property_id)
        .values(booked_count=0, status=AvailabilityStatus.AVAILABLE.value, updated_at=now)
    )

    held = conn.execute(
        select(Reservation.check_in, Reservation.check_out)
        .where(Reservation.property_id == property_id)
        .where(Reservation.calendar_held.is_(True))
    ).fetchall()

    counts: Counter[date] = Counter()
    for check_in, check_out in held:
        counts.update(iter_nights(check_in, check_out))

    if counts:
        stmt = dialect_insert(conn, AvailabilityDay).values(
            [
                {
                    "property_id": property_id,
                    "date": night,
                    "status": AvailabilityStatus.BOOKED.value,
                    "booked_count": count,
                    "updated_at": now,
                }
                for night, count in sorted(counts.items())
            ]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["property_id", "date"],
            set_={
                "booked_count": stmt.excluded.booked_count,
                "status": stmt.excluded.status,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        conn.execute(stmt)

    logger.info(
        "calendar_rebuilt",
        property_id=property_id,
        reservations=len(held),
        booked_days=len(counts),
    )
    return len(counts)
