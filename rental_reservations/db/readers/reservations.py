"""
Reservation reads: single lookups, the Conflict Checker, listings and calendar events.
"""

import math
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.sql.elements import ColumnElement

from rental_reservations.models.enums import TERMINAL_BOOKING_STATUSES
from rental_reservations.models.properties import Guest, Property
from rental_reservations.models.reservations import Reservation
from rental_reservations.schemas.reservations import (
    CalendarEvent,
    Pagination,
    ReservationFilters,
    ReservationPage,
    ReservationView,
)
from rental_reservations.services.pricing import compute_nights, outstanding_balance

RELEASED_STATUSES = [status.value for status in TERMINAL_BOOKING_STATUSES]

_reservations = Reservation.__table__
reservation_join = _reservations.outerjoin(
    Property.__table__, Reservation.property_id == Property.id
).outerjoin(Guest.__table__, Reservation.guest_id == Guest.id)

_VIEW_COLUMNS = [
    _reservations,
    Property.name.label("property_name"),
    Property.property_type.label("property_type"),
    Property.address.label("property_address"),
    Property.city.label("property_city"),
    Guest.first_name.label("guest_first_name"),
    Guest.last_name.label("guest_last_name"),
    Guest.email.label("guest_email"),
    Guest.phone.label("guest_phone"),
]


def get_reservation_row(
    conn: Connection, reservation_id: str, for_update: bool = False
) -> Optional[RowMapping]:
    """
    Fetch the raw reservation row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        reservation_id (str): Reservation ID.
        for_update (bool): Lock the row until the transaction ends.

    Returns:
        Optional[RowMapping]: Column mapping, or None if not found.
    """
    stmt = select(_reservations).where(Reservation.id == reservation_id)
    if for_update:
        stmt = stmt.with_for_update()
    return conn.execute(stmt).mappings().fetchone()


def get_reservation_view(conn: Connection, reservation_id: str) -> Optional[ReservationView]:
    """
    Fetch the public projection of a reservation, with property and guest display fields.

    Returns:
        Optional[ReservationView]: The view, or None if not found.
    """
    row = (
        conn.execute(
            select(*_VIEW_COLUMNS).select_from(reservation_join).where(Reservation.id == reservation_id)
        )
        .mappings()
        .fetchone()
    )
    return row_to_view(row) if row else None


def row_to_view(row: RowMapping) -> ReservationView:
    """Build the public projection from a joined reservation row."""
    first = row.get("guest_first_name") or ""
    last = row.get("guest_last_name") or ""
    total = Decimal(str(row["total_amount"]))
    paid = Decimal(str(row["paid_amount"]))

    return ReservationView(
        id=row["id"],
        property_id=row["property_id"],
        property_name=row.get("property_name") or "",
        property_type=row.get("property_type") or "",
        property_address=row.get("property_address") or "",
        property_city=row.get("property_city") or "",
        guest_id=row["guest_id"],
        guest_name=f"{first} {last}".strip(),
        guest_email=row.get("guest_email") or "",
        guest_phone=row.get("guest_phone") or "",
        check_in=row["check_in"],
        check_out=row["check_out"],
        booking_status=row["booking_status"],
        payment_status=row["payment_status"],
        occupancy_status=row["occupancy_status"],
        total_amount=total,
        paid_amount=paid,
        outstanding_balance=outstanding_balance(total, paid),
        guest_count=row["guest_count"],
        nights=compute_nights(row["check_in"], row["check_out"]),
        special_requests=row["special_requests"],
        source=row["source"],
        external_id=row["external_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def overlapping(check_in: date, check_out: date) -> ColumnElement[bool]:
    """Half-open interval overlap: a stay ending on `check_in` does not overlap."""
    return and_(Reservation.check_in < check_out, Reservation.check_out > check_in)


def has_conflict(
    conn: Connection,
    property_id: str,
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[str] = None,
) -> bool:
    """
    Check whether an active reservation on the property overlaps [check_in, check_out).

    Cancelled, completed and no-show reservations never conflict. Back-to-back
    stays (one check-out equal to the next check-in) do not conflict.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property to check.
        check_in (date): Candidate first night.
        check_out (date): Candidate exclusive end.
        exclude_reservation_id (str | None): Reservation to ignore (the one being updated).

    Returns:
        bool: True if a conflicting reservation exists.
    """
    stmt = (
        select(Reservation.id)
        .where(Reservation.property_id == property_id)
        .where(overlapping(check_in, check_out))
        .where(Reservation.booking_status.not_in(RELEASED_STATUSES))
    )
    if exclude_reservation_id is not None:
        stmt = stmt.where(Reservation.id != exclude_reservation_id)

    return conn.execute(stmt.limit(1)).fetchone() is not None


def filter_conditions(filters: ReservationFilters) -> list[ColumnElement[bool]]:
    """Translate typed filters into WHERE clauses over the reservation/guest join."""
    conditions: list[ColumnElement[bool]] = []

    if filters.check_in_from:
        conditions.append(Reservation.check_in >= filters.check_in_from)
    if filters.check_in_to:
        conditions.append(Reservation.check_in <= filters.check_in_to)
    if filters.statuses:
        conditions.append(Reservation.booking_status.in_([s.value for s in filters.statuses]))
    if filters.sources:
        conditions.append(Reservation.source.in_([s.value for s in filters.sources]))
    if filters.property_ids:
        conditions.append(Reservation.property_id.in_(filters.property_ids))
    if filters.min_amount is not None:
        conditions.append(Reservation.total_amount >= filters.min_amount)
    if filters.max_amount is not None:
        conditions.append(Reservation.total_amount <= filters.max_amount)
    if filters.guest_name:
        pattern = f"%{filters.guest_name}%"
        conditions.append(
            or_(
                Guest.first_name.ilike(pattern),
                Guest.last_name.ilike(pattern),
                Guest.email.ilike(pattern),
            )
        )

    return conditions


def list_reservations(
    conn: Connection, filters: ReservationFilters, owner_id: Optional[str] = None
) -> ReservationPage:
    """
    List reservations matching the filters, newest first, with pagination metadata.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        filters (ReservationFilters): Validated filters, including page and limit.
        owner_id (str | None): Restrict to properties owned by this user.

    Returns:
        ReservationPage: The requested page and pagination metadata.
    """
    conditions = filter_conditions(filters)
    if owner_id is not None:
        conditions.append(Property.owner_id == owner_id)

    total = conn.execute(
        select(func.count()).select_from(reservation_join).where(*conditions)
    ).scalar_one()

    rows = (
        conn.execute(
            select(*_VIEW_COLUMNS)
            .select_from(reservation_join)
            .where(*conditions)
            .order_by(Reservation.created_at.desc(), Reservation.id)
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        .mappings()
        .fetchall()
    )

    total_pages = math.ceil(total / filters.limit)
    return ReservationPage(
        reservations=[row_to_view(row) for row in rows],
        pagination=Pagination(
            page=filters.page,
            limit=filters.limit,
            total=total,
            total_pages=total_pages,
            has_next=filters.page < total_pages,
            has_prev=filters.page > 1,
        ),
    )


def get_calendar_events(
    conn: Connection,
    property_id: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    owner_id: Optional[str] = None,
) -> list[CalendarEvent]:
    """
    Reservations touching the window [start, end], ordered by check-in.

    A reservation is included when it starts or ends inside the window, or
    spans it entirely. When owner_id is given only that owner's properties
    are considered.
    """
    stmt = select(*_VIEW_COLUMNS).select_from(reservation_join)
    if owner_id is not None:
        stmt = stmt.where(Property.owner_id == owner_id)
    if property_id:
        stmt = stmt.where(Reservation.property_id == property_id)
    if start and end:
        stmt = stmt.where(
            or_(
                Reservation.check_in.between(start, end),
                Reservation.check_out.between(start, end),
                and_(Reservation.check_in <= start, Reservation.check_out >= end),
            )
        )

    rows = conn.execute(stmt.order_by(Reservation.check_in)).mappings().fetchall()
    return [_row_to_event(row) for row in rows]


def _row_to_event(row: RowMapping) -> CalendarEvent:
    first = row.get("guest_first_name") or ""
    last = row.get("guest_last_name") or ""
    return CalendarEvent(
        id=row["id"],
        title=f"{first} {last}".strip(),
        start=row["check_in"],
        end=row["check_out"],
        property_id=row["property_id"],
        property_name=row.get("property_name") or "",
        status=row["booking_status"],
        guest_status=row["occupancy_status"],
        total_amount=Decimal(str(row["total_amount"])),
        guest_count=row["guest_count"],
    )
