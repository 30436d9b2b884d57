"""
Integration tests for reservation listings, stats and calendar queries.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from rental_reservations.db.readers.directory import find_available_properties
from rental_reservations.db.readers.reservations import get_calendar_events, list_reservations
from rental_reservations.db.readers.stats import get_reservation_stats, get_source_breakdown
from rental_reservations.models.enums import BookingStatus, ReservationSource
from rental_reservations.schemas.actors import Actor
from rental_reservations.schemas.reservations import ReservationCreatePayload, ReservationFilters
from rental_reservations.services.lifecycle import ReservationLifecycle


@pytest.fixture
def booked(
    lifecycle: ReservationLifecycle,
    manager: Actor,
    make_payload: Callable[..., ReservationCreatePayload],
) -> dict[str, str]:
    """
    Four reservations:
        pending    prop-1  Jun 1-4   300.00  DIRECT   Ana
        confirmed  prop-1  Jun 10-12 200.00  AIRBNB   Ben
        completed  prop-2  Jun 1-3   300.00  AIRBNB   Ana
        cancelled  prop-2  Jul 1-5   600.00  VRBO     Ben
    """
    pending = lifecycle.create(make_payload(), manager)
    confirmed = lifecycle.create(
        make_payload(
            guest_id="guest-2",
            check_in=date(2030, 6, 10),
            check_out=date(2030, 6, 12),
            booking_status=BookingStatus.CONFIRMED,
            source=ReservationSource.AIRBNB,
        ),
        manager,
    )
    completed = lifecycle.create(
        make_payload(
            property_id="prop-2",
            check_out=date(2030, 6, 3),
            booking_status=BookingStatus.CONFIRMED,
            source=ReservationSource.AIRBNB,
        ),
        manager,
    )
    lifecycle.check_in(completed.id, manager)
    lifecycle.check_out(completed.id, manager)
    cancelled = lifecycle.create(
        make_payload(
            property_id="prop-2",
            guest_id="guest-2",
            check_in=date(2030, 7, 1),
            check_out=date(2030, 7, 5),
            source=ReservationSource.VRBO,
        ),
        manager,
    )
    lifecycle.cancel(cancelled.id, manager)
    return {
        "pending": pending.id,
        "confirmed": confirmed.id,
        "completed": completed.id,
        "cancelled": cancelled.id,
    }


@pytest.mark.integration
def test_stats_on_empty_set_are_zero(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        stats = get_reservation_stats(conn, ReservationFilters())

    assert stats.total_reservations == 0
    assert stats.total_revenue == Decimal("0")
    assert stats.average_amount == Decimal("0")
    assert stats.occupancy_rate == 0.0


@pytest.mark.integration
def test_stats_counts_and_revenue(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        stats = get_reservation_stats(conn, ReservationFilters())

    assert stats.total_reservations == 4
    assert stats.pending_reservations == 1
    assert stats.confirmed_reservations == 1
    assert stats.completed_reservations == 1
    assert stats.cancelled_reservations == 1
    assert stats.no_show_reservations == 0
    assert stats.total_revenue == Decimal("500.00")
    assert stats.average_amount == Decimal("250.00")
    assert stats.occupancy_rate == pytest.approx(50.0)


@pytest.mark.integration
def test_stats_scoped_to_owner(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        stats = get_reservation_stats(conn, ReservationFilters(), owner_id="owner-2")

    assert stats.total_reservations == 2
    assert stats.total_revenue == Decimal("300.00")


@pytest.mark.integration
def test_list_paginates_newest_first(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        first = list_reservations(conn, ReservationFilters(limit=3))
        second = list_reservations(conn, ReservationFilters(page=2, limit=3))

    assert first.pagination.total == 4
    assert first.pagination.total_pages == 2
    assert first.pagination.has_next is True
    assert first.pagination.has_prev is False
    assert len(first.reservations) == 3
    assert len(second.reservations) == 1
    assert second.pagination.has_next is False
    assert second.pagination.has_prev is True
    listed = {view.id for view in first.reservations + second.reservations}
    assert listed == set(booked.values())


@pytest.mark.integration
def test_list_empty_set(seeded_engine: Engine) -> None:
    with seeded_engine.connect() as conn:
        page = list_reservations(conn, ReservationFilters())

    assert page.reservations == []
    assert page.pagination.total == 0
    assert page.pagination.total_pages == 0
    assert page.pagination.has_next is False


@pytest.mark.integration
@pytest.mark.parametrize(
    "filters,expected",
    [
        (ReservationFilters(statuses=[BookingStatus.CONFIRMED, BookingStatus.COMPLETED]), {"confirmed", "completed"}),
        (ReservationFilters(sources=[ReservationSource.AIRBNB]), {"confirmed", "completed"}),
        (ReservationFilters(property_ids=["prop-2"]), {"completed", "cancelled"}),
        (ReservationFilters(check_in_from=date(2030, 6, 5), check_in_to=date(2030, 6, 30)), {"confirmed"}),
        (ReservationFilters(min_amount=Decimal("250"), max_amount=Decimal("400")), {"pending", "completed"}),
        (ReservationFilters(guest_name="okaf"), {"confirmed", "cancelled"}),
        (ReservationFilters(guest_name="ana@example"), {"pending", "completed"}),
    ],
)
def test_list_filters(
    seeded_engine: Engine, booked: dict[str, str], filters: ReservationFilters, expected: set[str]
) -> None:
    with seeded_engine.connect() as conn:
        page = list_reservations(conn, filters)

    assert {view.id for view in page.reservations} == {booked[name] for name in expected}


@pytest.mark.integration
def test_list_scoped_to_owner(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        page = list_reservations(conn, ReservationFilters(), owner_id="owner-1")

    assert {view.id for view in page.reservations} == {booked["pending"], booked["confirmed"]}


@pytest.mark.integration
def test_source_breakdown_most_common_first(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        sources = get_source_breakdown(conn)

    assert [(entry.source, entry.count) for entry in sources] == [
        (ReservationSource.AIRBNB, 2),
        (ReservationSource.DIRECT, 1),
        (ReservationSource.VRBO, 1),
    ]


@pytest.mark.integration
def test_calendar_events_in_window(seeded_engine: Engine, booked: dict[str, str]) -> None:
    with seeded_engine.connect() as conn:
        events = get_calendar_events(
            conn, property_id="prop-1", start=date(2030, 6, 3), end=date(2030, 6, 9)
        )

    assert [event.id for event in events] == [booked["pending"]]
    assert events[0].title == "Ana Silva"
    assert events[0].property_name == "Harbour Loft"
    assert events[0].status == BookingStatus.PENDING


@pytest.mark.integration
def test_calendar_events_include_spanning_reservation(
    seeded_engine: Engine, booked: dict[str, str]
) -> None:
    with seeded_engine.connect() as conn:
        events = get_calendar_events(conn, start=date(2030, 7, 2), end=date(2030, 7, 3))

    assert [event.id for event in events] == [booked["cancelled"]]


@pytest.mark.integration
def test_available_properties_excludes_booked_and_inactive(
    seeded_engine: Engine, booked: dict[str, str]
) -> None:
    with seeded_engine.connect() as conn:
        june_2 = find_available_properties(conn, start=date(2030, 6, 2), end=date(2030, 6, 3))
        july = find_available_properties(conn, start=date(2030, 7, 1), end=date(2030, 7, 5))
        large_party = find_available_properties(conn, guests=3)

    # prop-2 finished its June stay, so only the pending prop-1 booking blocks
    assert [prop.id for prop in june_2] == ["prop-2"]
    # The cancelled July stay does not block prop-2; prop-3 is inactive
    assert [prop.id for prop in july] == ["prop-1", "prop-2"]
    assert [prop.id for prop in large_party] == ["prop-1"]
