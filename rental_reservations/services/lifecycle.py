"""
Reservation lifecycle engine.

Every mutating operation runs in one database transaction. Writers that can
take calendar nights lock the property row first, so two bookings on the same
property are serialized and the conflict check always sees committed state.
Audit events are emitted after commit through the injected recorder.
"""

import uuid
from contextlib import contextmanager
from datetime import date
from typing import Any, Callable, Iterator, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine, RowMapping

from rental_reservations.config import OPERATION_TIMEOUT_MS
from rental_reservations.db.readers.directory import get_property, guest_exists
from rental_reservations.db.readers.reservations import (
    get_reservation_row,
    get_reservation_view,
    has_conflict,
)
from rental_reservations.db.writers.availability import mark_range
from rental_reservations.db.writers.reservations import (
    delete_reservation,
    insert_reservation,
    update_reservation,
)
from rental_reservations.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ReservationError,
    UnauthorizedError,
    ValidationError,
)
from rental_reservations.metrics import conflicts_detected, operation_duration, operations_total
from rental_reservations.models.enums import (
    TERMINAL_BOOKING_STATUSES,
    ActorRole,
    AvailabilityStatus,
    BookingStatus,
    OccupancyStatus,
    PaymentStatus,
)
from rental_reservations.schemas.actors import Actor
from rental_reservations.schemas.reservations import (
    ReservationCreatePayload,
    ReservationUpdatePayload,
    ReservationView,
    StatusUpdatePayload,
)
from rental_reservations.services.audit import AuditAction, AuditRecorder, snapshot
from rental_reservations.services.pricing import compute_total

logger = structlog.get_logger(__name__)

STAY_FIELDS = ("property_id", "check_in", "check_out")

_OUTCOMES: list[tuple[type[ReservationError], str]] = [
    (InvalidTransitionError, "invalid_transition"),
    (ConflictError, "conflict"),
    (NotFoundError, "not_found"),
    (ValidationError, "validation"),
    (UnauthorizedError, "unauthorized"),
]


def _outcome(error: ReservationError) -> str:
    for error_type, outcome in _OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    return "error"


@contextmanager
def _observe(operation: str) -> Iterator[None]:
    """Time an operation and count it by outcome."""
    with operation_duration.labels(operation=operation).time():
        try:
            yield
        except ReservationError as e:
            operations_total.labels(operation=operation, outcome=_outcome(e)).inc()
            logger.info("reservation_operation_rejected", operation=operation, reason=e.message, **e.context)
            raise
        except Exception:
            operations_total.labels(operation=operation, outcome="error").inc()
            raise
    operations_total.labels(operation=operation, outcome="success").inc()


def _storable(changes: dict[str, Any]) -> dict[str, Any]:
    """Enum members are stored by value."""
    return {key: getattr(value, "value", value) for key, value in changes.items()}


def _validate_stay(check_in: date, check_out: date, guest_count: int) -> None:
    if check_out <= check_in:
        raise ValidationError(
            "Check-out must be after check-in",
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
        )
    if guest_count < 1:
        raise ValidationError("Guest count must be at least 1", guest_count=guest_count)


def _validate_capacity(prop: RowMapping, guest_count: int) -> None:
    if guest_count > prop["capacity"]:
        raise ValidationError(
            "Guest count exceeds property capacity",
            property_id=prop["id"],
            capacity=prop["capacity"],
            guest_count=guest_count,
        )


def _authorize(actor: Actor, prop: Optional[RowMapping]) -> None:
    """Owners may only act on their own properties; staff roles act on all."""
    if actor.role != ActorRole.OWNER or prop is None:
        return
    if prop["owner_id"] != actor.id:
        raise UnauthorizedError(
            "Actor does not own this property", actor_id=actor.id, property_id=prop["id"]
        )


def _require_booking(
    current: RowMapping, allowed: set[BookingStatus], required: str, action: str
) -> None:
    if current["booking_status"] not in {status.value for status in allowed}:
        raise InvalidTransitionError(
            f"Cannot {action} a reservation that is {current['booking_status']}",
            current=current["booking_status"],
            required=required,
            reservation_id=current["id"],
        )


def _active_statuses() -> set[BookingStatus]:
    return set(BookingStatus) - TERMINAL_BOOKING_STATUSES


class ReservationLifecycle:
    """
    Orchestrates create, update, delete and the status transitions of reservations.

    The calendar is kept consistent with every reservation that holds it: a
    reservation takes its nights on create and gives them back exactly once,
    when it is cancelled, checked out, marked as no-show or deleted.

    Example:
        >>> lifecycle = ReservationLifecycle(engine, SqlAuditRecorder(engine))
        >>> view = lifecycle.create(payload, Actor(id="user-1"))
        >>> lifecycle.confirm(view.id, Actor(id="user-1"))
    """

    def __init__(
        self,
        engine: Engine,
        audit: AuditRecorder,
        timeout_ms: Optional[int] = OPERATION_TIMEOUT_MS,
    ) -> None:
        self.engine = engine
        self.audit = audit
        self.timeout_ms = timeout_ms

    @contextmanager
    def _transaction(self) -> Iterator[Connection]:
        with self.engine.begin() as conn:
            if self.timeout_ms and conn.dialect.name == "postgresql":
                conn.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout_ms)}"))
            yield conn

    def _locked_property(self, conn: Connection, property_id: str, actor: Actor) -> RowMapping:
        prop = get_property(conn, property_id, for_update=True)
        if prop is None:
            raise NotFoundError("Property not found", property_id=property_id)
        _authorize(actor, prop)
        return prop

    def _current(self, conn: Connection, reservation_id: str) -> RowMapping:
        current = get_reservation_row(conn, reservation_id, for_update=True)
        if current is None:
            raise NotFoundError("Reservation not found", reservation_id=reservation_id)
        return current

    def get(self, reservation_id: str, actor: Actor) -> ReservationView:
        with self.engine.connect() as conn:
            view = get_reservation_view(conn, reservation_id)
            if view is None:
                raise NotFoundError("Reservation not found", reservation_id=reservation_id)
            _authorize(actor, get_property(conn, view.property_id))
        return view

    def create(self, payload: ReservationCreatePayload, actor: Actor) -> ReservationView:
        """
        Book a property for a guest.

        Raises:
            ValidationError: Empty or inverted range, or a bad guest count
            NotFoundError: Unknown property or guest
            ConflictError: The range overlaps an active reservation
            UnauthorizedError: An owner booking someone else's property
        """
        booking_status = payload.booking_status or BookingStatus.PENDING
        holds_calendar = booking_status not in TERMINAL_BOOKING_STATUSES

        with _observe("create"):
            _validate_stay(payload.check_in, payload.check_out, payload.guest_count)

            with self._transaction() as conn:
                prop = self._locked_property(conn, payload.property_id, actor)
                if not guest_exists(conn, payload.guest_id):
                    raise NotFoundError("Guest not found", guest_id=payload.guest_id)
                _validate_capacity(prop, payload.guest_count)

                if holds_calendar and has_conflict(
                    conn, payload.property_id, payload.check_in, payload.check_out
                ):
                    conflicts_detected.labels(operation="create").inc()
                    raise ConflictError(
                        "Property is already booked for the selected dates",
                        property_id=payload.property_id,
                        check_in=payload.check_in.isoformat(),
                        check_out=payload.check_out.isoformat(),
                    )

                reservation_id = str(uuid.uuid4())
                insert_reservation(
                    conn,
                    {
                        "id": reservation_id,
                        "property_id": payload.property_id,
                        "guest_id": payload.guest_id,
                        "check_in": payload.check_in,
                        "check_out": payload.check_out,
                        "guest_count": payload.guest_count,
                        "total_amount": compute_total(
                            prop["nightly_rate"], payload.check_in, payload.check_out
                        ),
                        "paid_amount": payload.paid_amount,
                        "booking_status": booking_status.value,
                        "payment_status": (payload.payment_status or PaymentStatus.UNPAID).value,
                        "occupancy_status": (
                            payload.occupancy_status or OccupancyStatus.UPCOMING
                        ).value,
                        "source": payload.source.value,
                        "external_id": payload.external_id,
                        "special_requests": payload.special_requests,
                        "calendar_held": holds_calendar,
                    },
                )
                if holds_calendar:
                    mark_range(
                        conn,
                        payload.property_id,
                        payload.check_in,
                        payload.check_out,
                        AvailabilityStatus.BOOKED,
                    )
                view = get_reservation_view(conn, reservation_id)

        logger.info(
            "reservation_created",
            reservation_id=reservation_id,
            property_id=payload.property_id,
            check_in=payload.check_in.isoformat(),
            check_out=payload.check_out.isoformat(),
            actor_id=actor.id,
        )
        self.audit.record(actor.id, AuditAction.CREATE_RESERVATION, reservation_id, after=snapshot(view))
        return view

    def update(
        self, reservation_id: str, payload: ReservationUpdatePayload, actor: Actor
    ) -> ReservationView:
        """
        Patch a reservation.

        When the property or dates change, the new stay is checked for
        conflicts (ignoring this reservation), the total is recomputed and a
        held calendar range is moved. Status fields are overwritten as given.
        """
        changes = payload.changes()

        with _observe("update"):
            with self._transaction() as conn:
                current = self._current(conn, reservation_id)

                property_id = changes.get("property_id", current["property_id"])
                locked = {
                    pid: self._locked_property(conn, pid, actor)
                    for pid in sorted({current["property_id"], property_id})
                }
                before = get_reservation_view(conn, reservation_id)
                if not changes:
                    return before

                target = locked[property_id]
                check_in = changes.get("check_in", current["check_in"])
                check_out = changes.get("check_out", current["check_out"])
                guest_count = changes.get("guest_count", current["guest_count"])
                _validate_stay(check_in, check_out, guest_count)

                if "guest_id" in changes and not guest_exists(conn, changes["guest_id"]):
                    raise NotFoundError("Guest not found", guest_id=changes["guest_id"])
                if "guest_count" in changes or property_id != current["property_id"]:
                    _validate_capacity(target, guest_count)

                values = _storable(changes)
                stay_changed = any(field in changes for field in STAY_FIELDS)
                if stay_changed:
                    if has_conflict(
                        conn, property_id, check_in, check_out, exclude_reservation_id=reservation_id
                    ):
                        conflicts_detected.labels(operation="update").inc()
                        raise ConflictError(
                            "Property is already booked for the selected dates",
                            property_id=property_id,
                            check_in=check_in.isoformat(),
                            check_out=check_out.isoformat(),
                            reservation_id=reservation_id,
                        )
                    values["total_amount"] = compute_total(target["nightly_rate"], check_in, check_out)

                    if current["calendar_held"]:
                        mark_range(
                            conn,
                            current["property_id"],
                            current["check_in"],
                            current["check_out"],
                            AvailabilityStatus.AVAILABLE,
                        )
                        mark_range(conn, property_id, check_in, check_out, AvailabilityStatus.BOOKED)

                update_reservation(conn, reservation_id, values)
                after = get_reservation_view(conn, reservation_id)

        logger.info(
            "reservation_updated",
            reservation_id=reservation_id,
            fields=sorted(changes),
            actor_id=actor.id,
        )
        self.audit.record(
            actor.id,
            AuditAction.UPDATE_RESERVATION,
            reservation_id,
            before=snapshot(before),
            after=snapshot(after),
        )
        return after

    def delete(self, reservation_id: str, actor: Actor) -> None:
        """Remove a reservation, giving back its nights if it still holds them."""
        with _observe("delete"):
            with self._transaction() as conn:
                current = self._current(conn, reservation_id)
                self._locked_property(conn, current["property_id"], actor)
                before = get_reservation_view(conn, reservation_id)

                if current["calendar_held"]:
                    mark_range(
                        conn,
                        current["property_id"],
                        current["check_in"],
                        current["check_out"],
                        AvailabilityStatus.AVAILABLE,
                    )
                delete_reservation(conn, reservation_id)

        logger.info("reservation_deleted", reservation_id=reservation_id, actor_id=actor.id)
        self.audit.record(actor.id, AuditAction.DELETE_RESERVATION, reservation_id, before=snapshot(before))

    def update_status(
        self, reservation_id: str, payload: StatusUpdatePayload, actor: Actor
    ) -> ReservationView:
        """
        Overwrite any of the three status axes without guards.

        The calendar is not touched. A reservation forced into a terminal
        status this way keeps its nights until rebuild_calendar is run for
        the property.
        """
        changes = payload.changes()
        return self._transition(
            "update_status",
            AuditAction.UPDATE_RESERVATION_STATUS,
            reservation_id,
            actor,
            lambda current: _storable(changes),
        )

    def confirm(self, reservation_id: str, actor: Actor) -> ReservationView:
        def decide(current: RowMapping) -> dict[str, Any]:
            _require_booking(current, {BookingStatus.PENDING}, BookingStatus.PENDING.value, "confirm")
            return {"booking_status": BookingStatus.CONFIRMED.value}

        return self._transition("confirm", AuditAction.CONFIRM_RESERVATION, reservation_id, actor, decide)

    def cancel(self, reservation_id: str, actor: Actor) -> ReservationView:
        def decide(current: RowMapping) -> dict[str, Any]:
            _require_booking(current, _active_statuses(), "non-terminal", "cancel")
            return {
                "booking_status": BookingStatus.CANCELLED.value,
                "occupancy_status": OccupancyStatus.CANCELLED.value,
            }

        return self._transition(
            "cancel", AuditAction.CANCEL_RESERVATION, reservation_id, actor, decide, release=True
        )

    def check_in(self, reservation_id: str, actor: Actor) -> ReservationView:
        def decide(current: RowMapping) -> dict[str, Any]:
            _require_booking(current, {BookingStatus.CONFIRMED}, BookingStatus.CONFIRMED.value, "check in")
            return {"occupancy_status": OccupancyStatus.CHECKED_IN.value}

        return self._transition("check_in", AuditAction.CHECK_IN_GUEST, reservation_id, actor, decide)

    def check_out(self, reservation_id: str, actor: Actor) -> ReservationView:
        def decide(current: RowMapping) -> dict[str, Any]:
            if current["occupancy_status"] != OccupancyStatus.CHECKED_IN.value:
                raise InvalidTransitionError(
                    f"Cannot check out a guest who is {current['occupancy_status']}",
                    current=current["occupancy_status"],
                    required=OccupancyStatus.CHECKED_IN.value,
                    reservation_id=current["id"],
                )
            return {
                "booking_status": BookingStatus.COMPLETED.value,
                "occupancy_status": OccupancyStatus.CHECKED_OUT.value,
            }

        return self._transition(
            "check_out", AuditAction.CHECK_OUT_GUEST, reservation_id, actor, decide, release=True
        )

    def mark_no_show(self, reservation_id: str, actor: Actor) -> ReservationView:
        def decide(current: RowMapping) -> dict[str, Any]:
            _require_booking(current, _active_statuses(), "non-terminal", "mark as no-show")
            return {
                "booking_status": BookingStatus.NO_SHOW.value,
                "occupancy_status": OccupancyStatus.NO_SHOW.value,
            }

        return self._transition(
            "mark_no_show", AuditAction.MARK_NO_SHOW, reservation_id, actor, decide, release=True
        )

    def _transition(
        self,
        operation: str,
        action: AuditAction,
        reservation_id: str,
        actor: Actor,
        decide: Callable[[RowMapping], dict[str, Any]],
        release: bool = False,
    ) -> ReservationView:
        """
        Apply a status change computed by decide() to a locked reservation.

        With release=True a reservation that still holds its nights gives them
        back in the same transaction and stops holding them.
        """
        with _observe(operation):
            with self._transaction() as conn:
                current = self._current(conn, reservation_id)
                _authorize(actor, get_property(conn, current["property_id"]))
                before = get_reservation_view(conn, reservation_id)

                values = decide(current)
                if not values:
                    return before

                if release and current["calendar_held"]:
                    mark_range(
                        conn,
                        current["property_id"],
                        current["check_in"],
                        current["check_out"],
                        AvailabilityStatus.AVAILABLE,
                    )
                    values["calendar_held"] = False

                update_reservation(conn, reservation_id, values)
                after = get_reservation_view(conn, reservation_id)

        logger.info(
            "reservation_status_changed",
            operation=operation,
            reservation_id=reservation_id,
            booking_status=after.booking_status.value,
            occupancy_status=after.occupancy_status.value,
            actor_id=actor.id,
        )
        self.audit.record(actor.id, action, reservation_id, before=snapshot(before), after=snapshot(after))
        return after
