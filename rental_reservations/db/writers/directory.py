"""Writers for the property and guest directory the reservation core reads from."""

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy.engine import Engine

from rental_reservations.db.writers._upsert import upsert_with_distinct_check
from rental_reservations.models.properties import Guest, Property
from rental_reservations.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

PROPERTY_COLUMNS = [
    "name",
    "property_type",
    "address",
    "city",
    "capacity",
    "nightly_rate",
    "owner_id",
    "is_active",
]
GUEST_COLUMNS = ["first_name", "last_name", "email", "phone"]


def upsert_properties(engine: Engine, data: list[dict[str, Any]], dry_run: bool = False) -> None:
    """
    Upsert properties into the database, only updating rows whose values changed.

    Args:
        engine: SQLAlchemy Engine
        data: Property dicts; "id", "name" and "nightly_rate" are required
        dry_run: If True, skip DB writes and log only
    """
    now = utc_now()
    rows = []
    for prop in data:
        if not prop.get("id") or not prop.get("name") or prop.get("nightly_rate") is None:
            logger.warning("Skipping property with missing id/name/nightly_rate")
            continue

        rows.append(
            {
                "id": prop["id"],
                "name": prop["name"],
                "property_type": prop.get("property_type"),
                "address": prop.get("address"),
                "city": prop.get("city"),
                "capacity": prop.get("capacity", 1),
                "nightly_rate": Decimal(str(prop["nightly_rate"])),
                "owner_id": prop.get("owner_id"),
                "is_active": prop.get("is_active", True),
                "created_at": now,
                "updated_at": now,
            }
        )

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(rows)} properties")
        return

    if not rows:
        logger.info("No properties to upsert")
        return

    with engine.begin() as conn:
        upsert_with_distinct_check(conn, Property, rows, ["id"], PROPERTY_COLUMNS)

    logger.info(f"Upserted {len(rows)} properties into DB")


def upsert_guests(engine: Engine, data: list[dict[str, Any]], dry_run: bool = False) -> None:
    """
    Upsert guests into the database, only updating rows whose values changed.

    Args:
        engine: SQLAlchemy Engine
        data: Guest dicts; "id", "first_name" and "last_name" are required
        dry_run: If True, skip DB writes and log only
    """
    now = utc_now()
    rows = []
    for guest in data:
        if not guest.get("id") or not guest.get("first_name") or not guest.get("last_name"):
            logger.warning("Skipping guest with missing id/first_name/last_name")
            continue

        rows.append(
            {
                "id": guest["id"],
                "first_name": guest["first_name"],
                "last_name": guest["last_name"],
                "email": guest.get("email"),
                "phone": guest.get("phone"),
                "created_at": now,
                "updated_at": now,
            }
        )

    if dry_run:
        logger.info(f"[DRY RUN] Would upsert {len(rows)} guests")
        return

    if not rows:
        logger.info("No guests to upsert")
        return

    with engine.begin() as conn:
        upsert_with_distinct_check(conn, Guest, rows, ["id"], GUEST_COLUMNS)

    logger.info(f"Upserted {len(rows)} guests into DB")
