"""
Unit tests for the row locks taken by booking writers.

The statements are captured from a mocked connection and compiled for
PostgreSQL, where the locks are enforced.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from rental_reservations.db.readers.directory import get_property
from rental_reservations.db.readers.reservations import get_reservation_row


def _compiled(conn: MagicMock) -> str:
    stmt = conn.execute.call_args[0][0]
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.mark.unit
def test_property_lock_renders_for_update() -> None:
    conn = MagicMock()

    get_property(conn, "prop-1", for_update=True)

    assert "FOR UPDATE" in _compiled(conn)


@pytest.mark.unit
def test_plain_property_read_takes_no_lock() -> None:
    conn = MagicMock()

    get_property(conn, "prop-1")

    assert "FOR UPDATE" not in _compiled(conn)


@pytest.mark.unit
def test_reservation_lock_renders_for_update() -> None:
    conn = MagicMock()

    get_reservation_row(conn, "res-1", for_update=True)

    assert "FOR UPDATE" in _compiled(conn)
