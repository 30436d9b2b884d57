"""
Recompute availability calendars from the reservations that hold them.

Repairs drift left by direct status overwrites (PATCH /reservations/{id}/status).

Usage:
    python scripts/rebuild_calendar.py prop-1 prop-2
    python scripts/rebuild_calendar.py --all
"""

import argparse

import structlog
from sqlalchemy import select

from rental_reservations.db.engine import engine
from rental_reservations.db.readers.directory import get_property
from rental_reservations.db.writers.availability import rebuild_calendar
from rental_reservations.logging_config import setup_logging
from rental_reservations.models.properties import Property

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Rebuild property availability calendars.")
    parser.add_argument("property_ids", nargs="*", help="Properties to rebuild")
    parser.add_argument("--all", action="store_true", help="Rebuild every property")
    args = parser.parse_args()

    if not args.all and not args.property_ids:
        parser.error("pass property IDs or --all")

    with engine.connect() as conn:
        property_ids = (
            list(conn.execute(select(Property.id).order_by(Property.id)).scalars())
            if args.all
            else args.property_ids
        )

    for property_id in property_ids:
        try:
            with engine.begin() as conn:
                # Same lock the lifecycle engine takes before touching the calendar
                if get_property(conn, property_id, for_update=True) is None:
                    logger.warning("property_not_found", property_id=property_id)
                    continue
                booked_days = rebuild_calendar(conn, property_id)
            logger.info("calendar_rebuild_complete", property_id=property_id, booked_days=booked_days)
        except Exception:
            logger.exception("calendar_rebuild_failed", property_id=property_id)
            raise


if __name__ == "__main__":
    main()
