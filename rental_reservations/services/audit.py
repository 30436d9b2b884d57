"""
Audit Recorder: append-only log of reservation state transitions.

The recorder is injected into the lifecycle engine. Audit rows are written
after the primary transaction commits, so an audit failure can never roll
back a booking; it is logged and counted instead.
"""

from enum import Enum
from typing import Any, Optional, Protocol

import structlog
from sqlalchemy.engine import Engine

from rental_reservations.db.writers.audit import insert_audit_record
from rental_reservations.metrics import audit_write_failures
from rental_reservations.schemas.reservations import ReservationView

logger = structlog.get_logger(__name__)


class AuditAction(str, Enum):
    CREATE_RESERVATION = "CREATE_RESERVATION"
    UPDATE_RESERVATION = "UPDATE_RESERVATION"
    DELETE_RESERVATION = "DELETE_RESERVATION"
    UPDATE_RESERVATION_STATUS = "UPDATE_RESERVATION_STATUS"
    CONFIRM_RESERVATION = "CONFIRM_RESERVATION"
    CANCEL_RESERVATION = "CANCEL_RESERVATION"
    CHECK_IN_GUEST = "CHECK_IN_GUEST"
    CHECK_OUT_GUEST = "CHECK_OUT_GUEST"
    MARK_NO_SHOW = "MARK_NO_SHOW"


class AuditRecorder(Protocol):
    """Sink for audit events emitted by the lifecycle engine."""

    def record(
        self,
        actor_id: str,
        action: AuditAction,
        entity_id: str,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
    ) -> None: ...


class SqlAuditRecorder:
    """
    Writes audit events to the audit_log table, one short transaction per event.

    Example:
        >>> recorder = SqlAuditRecorder(engine)
        >>> recorder.record("user-1", AuditAction.CHECK_IN_GUEST, "res-1", before, after)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def record(
        self,
        actor_id: str,
        action: AuditAction,
        entity_id: str,
        before: Optional[dict[str, Any]] = None,
        after: Optional[dict[str, Any]] = None,
    ) -> None:
        try:
            with self.engine.begin() as conn:
                insert_audit_record(
                    conn,
                    actor_id=actor_id,
                    action=action.value,
                    entity_id=entity_id,
                    before=before,
                    after=after,
                )
        except Exception as e:
            audit_write_failures.labels(action=action.value).inc()
            logger.exception(
                "audit_write_failed",
                action=action.value,
                entity_id=entity_id,
                actor_id=actor_id,
                error=str(e),
            )


def snapshot(view: Optional[ReservationView]) -> Optional[dict[str, Any]]:
    """JSON-safe snapshot of a reservation for the audit log, keyed like the API response."""
    return view.model_dump(mode="json", by_alias=True) if view is not None else None
