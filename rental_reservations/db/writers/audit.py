from typing import Any, Optional

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from rental_reservations.models.audit import AuditRecord
from rental_reservations.utils.datetime import utc_now


def insert_audit_record(
    conn: Connection,
    actor_id: str,
    action: str,
    entity_id: str,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    entity_type: str = "RESERVATION",
) -> None:
    """
    Append one row to the audit log.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        actor_id (str): User who performed the action.
        action (str): Action tag, e.g. CREATE_RESERVATION.
        entity_id (str): ID of the changed entity.
        before (dict | None): JSON snapshot before the change.
        after (dict | None): JSON snapshot after the change.
        entity_type (str): Kind of entity changed.
    """
    conn.execute(
        insert(AuditRecord).values(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            before=before,
            after=after,
            created_at=utc_now(),
        )
    )
