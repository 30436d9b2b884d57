from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.engine import Connection, RowMapping

from rental_reservations.db.readers.reservations import RELEASED_STATUSES, overlapping
from rental_reservations.models.properties import Guest, Property
from rental_reservations.models.reservations import Reservation
from rental_reservations.schemas.reservations import AvailableProperty


def get_property(
    conn: Connection, property_id: str, for_update: bool = False
) -> Optional[RowMapping]:
    """
    Fetch a property row.

    With for_update=True the row is locked until the transaction ends. Every
    booking write takes this lock first, which serializes writers per property.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.
        for_update (bool): Lock the property row.

    Returns:
        Optional[RowMapping]: Property columns, or None if not found.
    """
    stmt = select(Property.__table__).where(Property.id == property_id)
    if for_update:
        stmt = stmt.with_for_update()
    return conn.execute(stmt).mappings().fetchone()


def guest_exists(conn: Connection, guest_id: str) -> bool:
    """
    Check if a guest exists in the database.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        guest_id (str): Guest ID to check.

    Returns:
        bool: True if the guest exists, False otherwise.
    """
    result = conn.execute(select(Guest.id).where(Guest.id == guest_id))
    return result.fetchone() is not None


def find_available_properties(
    conn: Connection,
    start: Optional[date] = None,
    end: Optional[date] = None,
    guests: Optional[int] = None,
) -> list[AvailableProperty]:
    """
    Active properties that can host the party and have no active booking in [start, end).

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        start (date | None): First night wanted.
        end (date | None): Exclusive end; the date filter applies only when both are given.
        guests (int | None): Minimum capacity.

    Returns:
        list[AvailableProperty]: Matching properties ordered by name.
    """
    stmt = select(Property.__table__).where(Property.is_active.is_(True))
    if guests:
        stmt = stmt.where(Property.capacity >= guests)
    if start and end:
        booked = (
            select(Reservation.id)
            .where(Reservation.property_id == Property.id)
            .where(overlapping(start, end))
            .where(Reservation.booking_status.not_in(RELEASED_STATUSES))
        )
        stmt = stmt.where(~exists(booked))

    rows = conn.execute(stmt.order_by(Property.name)).mappings().fetchall()
    return [
        AvailableProperty(
            id=row["id"],
            name=row["name"],
            property_type=row["property_type"],
            address=row["address"],
            city=row["city"],
            capacity=row["capacity"],
            nightly_rate=Decimal(str(row["nightly_rate"])),
        )
        for row in rows
    ]
