"""Status axes and reference values shared by models, schemas and services."""

from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"
    MODIFIED = "MODIFIED"


class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    FULLY_PAID = "FULLY_PAID"
    REFUNDED = "REFUNDED"
    PENDING_REFUND = "PENDING_REFUND"


class OccupancyStatus(str, Enum):
    UPCOMING = "UPCOMING"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"


class ReservationSource(str, Enum):
    DIRECT = "DIRECT"
    AIRBNB = "AIRBNB"
    BOOKING_COM = "BOOKING_COM"
    VRBO = "VRBO"
    OTHER = "OTHER"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"


class ActorRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    AGENT = "AGENT"
    OWNER = "OWNER"
    GUEST = "GUEST"


# Booking states that end a reservation. None of them holds calendar nights,
# so the conflict check ignores reservations in these states.
TERMINAL_BOOKING_STATUSES = frozenset(
    {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW}
)

# Booking states counted as earned revenue and occupancy by the stats layer.
REVENUE_BOOKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.COMPLETED})
