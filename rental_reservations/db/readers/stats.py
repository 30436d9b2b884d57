"""
Query/Stats Layer: read-only aggregation over the reservation set.

Every aggregate tolerates an empty set: counts, revenue, averages and the
occupancy rate all fall back to zero.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from rental_reservations.db.readers.reservations import filter_conditions, reservation_join
from rental_reservations.models.enums import (
    REVENUE_BOOKING_STATUSES,
    BookingStatus,
    ReservationSource,
)
from rental_reservations.models.properties import Property
from rental_reservations.models.reservations import Reservation
from rental_reservations.schemas.reservations import (
    ReservationFilters,
    ReservationStats,
    SourceCount,
)
from rental_reservations.services.pricing import CENTS


def _to_decimal(value: object) -> Decimal:
    if value is None:
        return Decimal("0").quantize(CENTS)
    return Decimal(str(value)).quantize(CENTS)


def get_reservation_stats(
    conn: Connection, filters: ReservationFilters, owner_id: Optional[str] = None
) -> ReservationStats:
    """
    Count reservations per booking status and aggregate revenue.

    Revenue and the average amount are taken over CONFIRMED and COMPLETED
    reservations; occupancy rate is their share of all matching reservations,
    as a percentage.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        filters (ReservationFilters): Filters; pagination fields are ignored.
        owner_id (str | None): Restrict to properties owned by this user.

    Returns:
        ReservationStats: Aggregates, all zero for an empty set.
    """
    conditions = filter_conditions(filters)
    if owner_id is not None:
        conditions.append(Property.owner_id == owner_id)

    counts: dict[str, int] = {
        status: count
        for status, count in conn.execute(
            select(Reservation.booking_status, func.count())
            .select_from(reservation_join)
            .where(*conditions)
            .group_by(Reservation.booking_status)
        ).fetchall()
    }

    revenue_statuses = [status.value for status in REVENUE_BOOKING_STATUSES]
    revenue, average = conn.execute(
        select(func.sum(Reservation.total_amount), func.avg(Reservation.total_amount))
        .select_from(reservation_join)
        .where(*conditions)
        .where(Reservation.booking_status.in_(revenue_statuses))
    ).one()

    total = sum(counts.values())
    earning = sum(counts.get(status, 0) for status in revenue_statuses)

    return ReservationStats(
        total_reservations=total,
        confirmed_reservations=counts.get(BookingStatus.CONFIRMED.value, 0),
        pending_reservations=counts.get(BookingStatus.PENDING.value, 0),
        cancelled_reservations=counts.get(BookingStatus.CANCELLED.value, 0),
        completed_reservations=counts.get(BookingStatus.COMPLETED.value, 0),
        no_show_reservations=counts.get(BookingStatus.NO_SHOW.value, 0),
        total_revenue=_to_decimal(revenue),
        average_amount=_to_decimal(average),
        occupancy_rate=(earning / total * 100) if total > 0 else 0.0,
    )


def get_source_breakdown(conn: Connection, owner_id: Optional[str] = None) -> list[SourceCount]:
    """
    Number of reservations per booking channel, most common first.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        owner_id (str | None): Restrict to properties owned by this user.

    Returns:
        list[SourceCount]: One entry per source that has reservations.
    """
    count = func.count(Reservation.id)
    stmt = select(Reservation.source, count).select_from(reservation_join)
    if owner_id is not None:
        stmt = stmt.where(Property.owner_id == owner_id)
    rows = conn.execute(
        stmt.group_by(Reservation.source).order_by(count.desc(), Reservation.source)
    ).fetchall()
    return [SourceCount(source=ReservationSource(source), count=n) for source, n in rows]
