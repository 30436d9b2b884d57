"""
SQLAlchemy engine singleton with production-ready connection pooling.

Reservation writes are short transactions that lock a single property row,
so the pool is sized for many concurrent, brief checkouts. SQLite URLs (used
by the test-suite and local experiments) get a single shared in-process
connection and have the schema name translated away.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from rental_reservations.config import DATABASE_URL, SCHEMA

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine for the given database URL.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Pooled engine for PostgreSQL, single-connection engine for SQLite
    """
    if make_url(url).get_backend_name() == "sqlite":
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        # SQLite has no schemas; tables live in the main database
        return sqlite_engine.execution_options(schema_translate_map={SCHEMA: None})

    options: dict[str, Any] = {
        "pool_size": 10,  # Number of connections to maintain in the pool
        "max_overflow": 20,  # Additional connections when pool is exhausted
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "echo": False,
    }
    return create_engine(url, **options)


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(db: Engine = engine) -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with db.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
