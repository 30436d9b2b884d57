"""
Load properties and guests from a JSON file into the directory tables.

The file holds {"properties": [...], "guests": [...]} with one object per
row, keyed by column name. Existing rows are updated in place.

Usage:
    python scripts/seed_directory.py tests/fixtures/directory.json --dry-run
"""

import argparse
import json

import structlog

from rental_reservations.db.engine import engine
from rental_reservations.db.writers.directory import upsert_guests, upsert_properties
from rental_reservations.logging_config import setup_logging

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the property and guest directory.")
    parser.add_argument("path", help="JSON file with properties and guests")
    parser.add_argument("--dry-run", action="store_true", help="Log instead of writing")
    args = parser.parse_args()

    with open(args.path) as f:
        data = json.load(f)

    upsert_properties(engine, data.get("properties", []), dry_run=args.dry_run)
    upsert_guests(engine, data.get("guests", []), dry_run=args.dry_run)
    logger.info(
        "directory_seeded",
        properties=len(data.get("properties", [])),
        guests=len(data.get("guests", [])),
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
