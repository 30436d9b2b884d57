"""
Dialect-aware upsert helpers with IS DISTINCT FROM optimization.

PostgreSQL is the production store; SQLite backs the test-suite. Both share
the same ``INSERT ... ON CONFLICT`` construct in SQLAlchemy, so writers build
their statements through :func:`dialect_insert` and stay dialect agnostic.
"""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def dialect_insert(conn: Connection, table: Any) -> Any:
    """
    Return an INSERT construct that supports ``on_conflict_do_update`` for the connection's dialect.

    Raises:
        NotImplementedError: For databases without ON CONFLICT support
    """
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upserts are not supported on {conn.dialect.name}")


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
    update_columns: list[str],
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where at least one of the update_columns actually changed,
    so updated_at is not bumped on no-op syncs of directory data.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., Property, Guest)
        rows: List of row dicts to upsert
        conflict_columns: Columns for ON CONFLICT (usually ["id"])
        update_columns: Columns to update on conflict; updated_at is always refreshed

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=Property,
        ...         rows=[{"id": "p-1", "name": "Loft", ...}],
        ...         conflict_columns=["id"],
        ...         update_columns=["name", "nightly_rate"],
        ...     )
    """
    if not rows:
        return

    stmt = dialect_insert(conn, table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}
    set_dict["updated_at"] = stmt.excluded.updated_at

    distinct_check = or_(
        *[
            getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
            for col in update_columns
        ]
    )

    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_columns,
        set_=set_dict,
        where=distinct_check,
    )

    conn.execute(stmt)
