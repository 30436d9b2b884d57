from typing import Any

from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from rental_reservations.models.reservations import Reservation
from rental_reservations.utils.datetime import utc_now


def insert_reservation(conn: Connection, row: dict[str, Any]) -> None:
    """
    Insert a single reservation row.

    Args:
        conn (Connection): SQLAlchemy DB connection (within the lifecycle transaction).
        row (dict): Column values; id, dates, amounts and statuses must be present.
    """
    now = utc_now()
    values = {"created_at": now, "updated_at": now, **row}
    conn.execute(insert(Reservation).values(**values))


def update_reservation(conn: Connection, reservation_id: str, data: dict[str, Any]) -> None:
    """
    Update reservation fields for an existing reservation.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (str): Reservation ID.
        data (dict): Column values to overwrite.
    """
    values = {**data, "updated_at": utc_now()}
    stmt = update(Reservation).where(Reservation.id == reservation_id).values(**values)
    conn.execute(stmt)


def delete_reservation(conn: Connection, reservation_id: str) -> None:
    """
    Permanently delete a reservation from the database.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (str): Reservation ID.
    """
    conn.execute(delete(Reservation).where(Reservation.id == reservation_id))
