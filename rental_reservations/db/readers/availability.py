from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_reservations.models.availability import AvailabilityDay
from rental_reservations.schemas.reservations import AvailabilityDayView


def get_calendar(
    conn: Connection,
    property_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[AvailabilityDayView]:
    """
    Stored calendar days of a property in [start, end), ordered by date.

    Days that were never booked have no row and are implicitly AVAILABLE.
    """
    stmt = select(AvailabilityDay.__table__).where(AvailabilityDay.property_id == property_id)
    if start:
        stmt = stmt.where(AvailabilityDay.date >= start)
    if end:
        stmt = stmt.where(AvailabilityDay.date < end)

    rows = conn.execute(stmt.order_by(AvailabilityDay.date)).mappings().fetchall()
    return [
        AvailabilityDayView(
            property_id=row["property_id"],
            day=row["date"],
            status=row["status"],
            booked_count=row["booked_count"],
        )
        for row in rows
    ]
