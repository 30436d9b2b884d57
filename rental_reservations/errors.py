"""
Domain errors raised by the reservation lifecycle and query layers.

Route handlers translate these into HTTP responses; every other caller
receives them unchanged. Each error carries a human readable message and
optional structured context for logging.
"""

from __future__ import annotations

from typing import Any


class ReservationError(Exception):
    """Base class for all reservation domain errors."""

    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(ReservationError):
    """A property, guest or reservation does not exist."""

    status_code = 404


class ConflictError(ReservationError):
    """The requested dates overlap an active reservation on the same property."""

    status_code = 409


class InvalidTransitionError(ConflictError):
    """A lifecycle transition was attempted from a state that does not allow it."""

    def __init__(self, message: str, *, current: str, required: str, **context: Any) -> None:
        super().__init__(message, current=current, required=required, **context)
        self.current = current
        self.required = required


class ValidationError(ReservationError):
    """Malformed input: an empty or inverted date range, or a bad guest count."""

    status_code = 422


class UnauthorizedError(ReservationError):
    """The caller has no rights over the property the reservation belongs to."""

    status_code = 403
