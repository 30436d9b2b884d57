"""
Integration tests for the /reservations and /properties endpoints.

The app runs against the seeded in-memory database through a dependency
override, with the SQL audit recorder writing to the same database.
"""

from __future__ import annotations

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.engine import Engine

from rental_reservations.dependencies import get_db_engine
from rental_reservations.main import app
from rental_reservations.models.audit import AuditRecord

MANAGER = {"X-Actor-Id": "manager-1", "X-Actor-Role": "MANAGER"}
OWNER_2 = {"X-Actor-Id": "owner-2", "X-Actor-Role": "OWNER"}

BOOKING = {
    "propertyId": "prop-1",
    "guestId": "guest-1",
    "checkIn": "2030-06-01",
    "checkOut": "2030-06-04",
    "guestCount": 2,
}


@pytest.fixture
def client(seeded_engine: Engine) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db_engine] = lambda: seeded_engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create(client: TestClient, **overrides: Any) -> dict[str, Any]:
    response = client.post("/reservations", json={**BOOKING, **overrides}, headers=MANAGER)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.integration
def test_create_returns_public_projection(client: TestClient) -> None:
    body = _create(client)

    assert body["propertyId"] == "prop-1"
    assert body["propertyName"] == "Harbour Loft"
    assert body["guestName"] == "Ana Silva"
    assert body["status"] == "PENDING"
    assert body["paymentStatus"] == "UNPAID"
    assert body["guestStatus"] == "UPCOMING"
    assert body["nights"] == 3
    assert body["totalAmount"] == "300.00"
    assert body["outstandingBalance"] == "300.00"


@pytest.mark.integration
def test_create_requires_actor(client: TestClient) -> None:
    response = client.post("/reservations", json=BOOKING)

    assert response.status_code == 401


@pytest.mark.integration
def test_create_overlap_is_409(client: TestClient) -> None:
    _create(client)

    response = client.post(
        "/reservations",
        json={**BOOKING, "guestId": "guest-2", "checkIn": "2030-06-02", "checkOut": "2030-06-05"},
        headers=MANAGER,
    )

    assert response.status_code == 409
    assert "already booked" in response.json()["detail"]["message"]


@pytest.mark.integration
def test_create_inverted_range_is_422(client: TestClient) -> None:
    response = client.post(
        "/reservations", json={**BOOKING, "checkOut": "2030-05-30"}, headers=MANAGER
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_create_unknown_property_is_404(client: TestClient) -> None:
    response = client.post(
        "/reservations", json={**BOOKING, "propertyId": "prop-404"}, headers=MANAGER
    )

    assert response.status_code == 404


@pytest.mark.integration
def test_owner_booking_foreign_property_is_403(client: TestClient) -> None:
    response = client.post("/reservations", json=BOOKING, headers=OWNER_2)

    assert response.status_code == 403


@pytest.mark.integration
def test_full_stay_lifecycle(client: TestClient) -> None:
    reservation_id = _create(client)["id"]

    early = client.post(f"/reservations/{reservation_id}/check-in", headers=MANAGER)
    assert early.status_code == 409
    assert early.json()["detail"]["current"] == "PENDING"
    assert early.json()["detail"]["required"] == "CONFIRMED"

    assert client.post(f"/reservations/{reservation_id}/confirm", headers=MANAGER).json()["status"] == "CONFIRMED"
    assert (
        client.post(f"/reservations/{reservation_id}/check-in", headers=MANAGER).json()["guestStatus"]
        == "CHECKED_IN"
    )
    done = client.post(f"/reservations/{reservation_id}/check-out", headers=MANAGER).json()
    assert done["status"] == "COMPLETED"
    assert done["guestStatus"] == "CHECKED_OUT"

    calendar = client.get("/properties/prop-1/availability", headers=MANAGER).json()
    assert {day["status"] for day in calendar} == {"AVAILABLE"}
    assert [day["date"] for day in calendar] == ["2030-06-01", "2030-06-02", "2030-06-03"]


@pytest.mark.integration
def test_cancel_and_no_show_routes(client: TestClient) -> None:
    first = _create(client)["id"]
    second = _create(client, checkIn="2030-06-10", checkOut="2030-06-12")["id"]

    cancelled = client.post(f"/reservations/{first}/cancel", headers=MANAGER).json()
    no_show = client.post(f"/reservations/{second}/no-show", headers=MANAGER).json()

    assert cancelled["status"] == "CANCELLED"
    assert no_show["status"] == "NO_SHOW"
    assert client.post(f"/reservations/{first}/cancel", headers=MANAGER).status_code == 409


@pytest.mark.integration
def test_patch_moves_dates(client: TestClient) -> None:
    reservation_id = _create(client)["id"]

    response = client.patch(
        f"/reservations/{reservation_id}",
        json={"checkIn": "2030-06-20", "checkOut": "2030-06-22"},
        headers=MANAGER,
    )

    assert response.status_code == 200
    assert response.json()["totalAmount"] == "200.00"
    booked = client.get(
        "/properties/prop-1/availability", params={"start": "2030-06-01"}, headers=MANAGER
    ).json()
    assert [day["date"] for day in booked if day["status"] == "BOOKED"] == ["2030-06-20", "2030-06-21"]


@pytest.mark.integration
def test_patch_status_overwrites_axes(client: TestClient) -> None:
    reservation_id = _create(client)["id"]

    response = client.patch(
        f"/reservations/{reservation_id}/status",
        json={"status": "CONFIRMED", "paymentStatus": "FULLY_PAID"},
        headers=MANAGER,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"
    assert response.json()["paymentStatus"] == "FULLY_PAID"


@pytest.mark.integration
def test_delete_then_rebook(client: TestClient) -> None:
    reservation_id = _create(client)["id"]

    assert client.delete(f"/reservations/{reservation_id}", headers=MANAGER).status_code == 204
    assert client.get(f"/reservations/{reservation_id}", headers=MANAGER).status_code == 404
    _create(client)


@pytest.mark.integration
def test_mutations_are_audited(client: TestClient, seeded_engine: Engine) -> None:
    reservation_id = _create(client)["id"]
    client.post(f"/reservations/{reservation_id}/confirm", headers=MANAGER)

    with seeded_engine.connect() as conn:
        actions = list(
            conn.execute(select(AuditRecord.action).order_by(AuditRecord.id)).scalars()
        )

    assert actions == ["CREATE_RESERVATION", "CONFIRM_RESERVATION"]


@pytest.mark.integration
def test_list_and_stats(client: TestClient) -> None:
    _create(client)
    _create(client, checkIn="2030-06-10", checkOut="2030-06-12", status="CONFIRMED", source="AIRBNB")

    listing = client.get("/reservations", params={"status": "CONFIRMED"}, headers=MANAGER).json()
    stats = client.get("/reservations/stats", headers=MANAGER).json()
    sources = client.get("/reservations/sources", headers=MANAGER).json()

    assert listing["pagination"]["total"] == 1
    assert listing["reservations"][0]["source"] == "AIRBNB"
    assert stats["totalReservations"] == 2
    assert stats["confirmedReservations"] == 1
    assert stats["totalRevenue"] == "200.00"
    assert stats["occupancyRate"] == pytest.approx(50.0)
    assert {entry["source"]: entry["count"] for entry in sources} == {"DIRECT": 1, "AIRBNB": 1}


@pytest.mark.integration
def test_list_rejects_inverted_filter_range(client: TestClient) -> None:
    response = client.get(
        "/reservations",
        params={"checkInFrom": "2030-07-01", "checkInTo": "2030-06-01"},
        headers=MANAGER,
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_owner_sees_only_own_reservations(client: TestClient) -> None:
    _create(client)
    _create(client, propertyId="prop-2")

    listing = client.get("/reservations", headers=OWNER_2).json()

    assert [view["propertyId"] for view in listing["reservations"]] == ["prop-2"]
    assert client.get("/properties/prop-1/availability", headers=OWNER_2).status_code == 403


@pytest.mark.integration
def test_owner_calendar_and_sources_are_scoped(client: TestClient) -> None:
    _create(client)
    _create(client, propertyId="prop-2", source="AIRBNB")

    foreign = client.get("/reservations/calendar", params={"propertyId": "prop-1"}, headers=OWNER_2)
    events = client.get("/reservations/calendar", headers=OWNER_2).json()
    sources = client.get("/reservations/sources", headers=OWNER_2).json()

    assert foreign.status_code == 403
    assert [event["propertyId"] for event in events] == ["prop-2"]
    assert sources == [{"source": "AIRBNB", "count": 1}]


@pytest.mark.integration
def test_calendar_and_available_properties(client: TestClient) -> None:
    _create(client)

    events = client.get(
        "/reservations/calendar",
        params={"propertyId": "prop-1", "start": "2030-06-01", "end": "2030-06-30"},
        headers=MANAGER,
    ).json()
    available = client.get(
        "/reservations/available-properties",
        params={"startDate": "2030-06-02", "endDate": "2030-06-03", "guests": 2},
        headers=MANAGER,
    ).json()

    assert [event["title"] for event in events] == ["Ana Silva"]
    assert [prop["id"] for prop in available] == ["prop-2"]


@pytest.mark.integration
def test_availability_unknown_property_is_404(client: TestClient) -> None:
    response = client.get("/properties/prop-404/availability", headers=MANAGER)

    assert response.status_code == 404
