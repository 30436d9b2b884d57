"""
Shared fixtures: an in-memory SQLite database with the reservation schema,
a seeded property/guest directory and a lifecycle engine wired to an
in-memory audit sink.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

from datetime import date  # noqa: E402
from typing import Any, Callable, Generator, Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from rental_reservations.db.engine import build_engine  # noqa: E402
from rental_reservations.db.writers.directory import upsert_guests, upsert_properties  # noqa: E402
from rental_reservations.models import audit, availability, properties, reservations  # noqa: E402,F401
from rental_reservations.models.base import Base  # noqa: E402
from rental_reservations.models.enums import ActorRole  # noqa: E402
from rental_reservations.schemas.actors import Actor  # noqa: E402
from rental_reservations.schemas.reservations import ReservationCreatePayload  # noqa: E402
from rental_reservations.services.audit import AuditAction  # noqa: E402
from rental_reservations.services.lifecycle import ReservationLifecycle  # noqa: E402

PROPERTIES = [
    {
        "id": "prop-1",
        "name": "Harbour Loft",
        "property_type": "APARTMENT",
        "address": "1 Quay Street",
        "city": "Lisbon",
        "capacity": 4,
        "nightly_rate": "100.00",
        "owner_id": "owner-1",
    },
    {
        "id": "prop-2",
        "name": "Hill Cabin",
        "property_type": "CABIN",
        "address": "7 Pine Road",
        "city": "Sintra",
        "capacity": 2,
        "nightly_rate": "150.00",
        "owner_id": "owner-2",
    },
    {
        "id": "prop-3",
        "name": "Old Mill",
        "property_type": "HOUSE",
        "address": "3 River Lane",
        "city": "Porto",
        "capacity": 8,
        "nightly_rate": "80.00",
        "owner_id": "owner-1",
        "is_active": False,
    },
]

GUESTS = [
    {
        "id": "guest-1",
        "first_name": "Ana",
        "last_name": "Silva",
        "email": "ana@example.com",
        "phone": "+351 910 000 001",
    },
    {
        "id": "guest-2",
        "first_name": "Ben",
        "last_name": "Okafor",
        "email": "ben@example.com",
        "phone": "+44 7700 900002",
    },
]


class RecordingAuditRecorder:
    """Audit sink that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def record(
        self,
        actor_id: str,
        action: AuditAction,
        entity_id: str,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
    ) -> None:
        self.events.append(
            {
                "actor_id": actor_id,
                "action": action,
                "entity_id": entity_id,
                "before": before,
                "after": after,
            }
        )

    def actions(self) -> list[AuditAction]:
        return [event["action"] for event in self.events]


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database with all tables created."""
    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(db_engine: Engine) -> Engine:
    """Database with three properties (one inactive) and two guests."""
    upsert_properties(db_engine, PROPERTIES)
    upsert_guests(db_engine, GUESTS)
    return db_engine


@pytest.fixture
def audit_recorder() -> RecordingAuditRecorder:
    return RecordingAuditRecorder()


@pytest.fixture
def lifecycle(seeded_engine: Engine, audit_recorder: RecordingAuditRecorder) -> ReservationLifecycle:
    return ReservationLifecycle(seeded_engine, audit_recorder)


@pytest.fixture
def manager() -> Actor:
    return Actor(id="manager-1", role=ActorRole.MANAGER)


@pytest.fixture
def make_payload() -> Callable[..., ReservationCreatePayload]:
    """Factory for create payloads; defaults book prop-1 for guest-1, 2030-06-01 to 2030-06-04."""

    def _make(**overrides: Any) -> ReservationCreatePayload:
        values: dict[str, Any] = {
            "property_id": "prop-1",
            "guest_id": "guest-1",
            "check_in": date(2030, 6, 1),
            "check_out": date(2030, 6, 4),
            "guest_count": 2,
        }
        values.update(overrides)
        return ReservationCreatePayload(**values)

    return _make
