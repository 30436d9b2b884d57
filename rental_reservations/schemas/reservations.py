from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from rental_reservations.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from rental_reservations.models.enums import (
    AvailabilityStatus,
    BookingStatus,
    OccupancyStatus,
    PaymentStatus,
    ReservationSource,
)


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReservationCreatePayload(CamelModel):
    """
    Schema for creating a reservation.

    Date-range and guest-count rules are enforced by the lifecycle engine so
    that direct callers and HTTP callers get the same domain error.
    """

    property_id: str = Field(..., description="Property to book")
    guest_id: str = Field(..., description="Guest holding the reservation")
    check_in: date = Field(..., description="First night of the stay (ISO-8601 date)")
    check_out: date = Field(..., description="Departure day, exclusive (ISO-8601 date)")
    guest_count: int = Field(1, description="Number of guests")
    booking_status: Optional[BookingStatus] = Field(None, alias="status")
    payment_status: Optional[PaymentStatus] = Field(None)
    occupancy_status: Optional[OccupancyStatus] = Field(None, alias="guestStatus")
    special_requests: Optional[str] = Field(None)
    source: ReservationSource = Field(ReservationSource.DIRECT, description="Booking channel")
    external_id: Optional[str] = Field(None, description="Channel-side reservation ID")
    paid_amount: Decimal = Field(Decimal("0"), ge=0)


CLEARABLE_FIELDS = {"special_requests", "external_id"}


class ReservationUpdatePayload(CamelModel):
    """
    Schema for patching a reservation. All fields are optional.
    Note: total_amount is derived and cannot be set directly.
    """

    property_id: Optional[str] = Field(None)
    guest_id: Optional[str] = Field(None)
    check_in: Optional[date] = Field(None)
    check_out: Optional[date] = Field(None)
    guest_count: Optional[int] = Field(None)
    booking_status: Optional[BookingStatus] = Field(None, alias="status")
    payment_status: Optional[PaymentStatus] = Field(None)
    occupancy_status: Optional[OccupancyStatus] = Field(None, alias="guestStatus")
    special_requests: Optional[str] = Field(None)
    source: Optional[ReservationSource] = Field(None)
    external_id: Optional[str] = Field(None)
    paid_amount: Optional[Decimal] = Field(None, ge=0)

    def changes(self) -> dict:
        """
        Return only the fields the caller supplied.

        An explicit null clears special_requests and external_id; on any
        other field it is ignored.
        """
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in CLEARABLE_FIELDS
        }


class StatusUpdatePayload(CamelModel):
    """Direct overwrite of any subset of the three status axes."""

    booking_status: Optional[BookingStatus] = Field(None, alias="status")
    payment_status: Optional[PaymentStatus] = Field(None)
    occupancy_status: Optional[OccupancyStatus] = Field(None, alias="guestStatus")

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class ReservationFilters(CamelModel):
    """
    Typed query filters for listing and aggregating reservations.

    Parsed and validated once at the API boundary; the readers consume the
    typed fields directly.
    """

    check_in_from: Optional[date] = None
    check_in_to: Optional[date] = None
    statuses: list[BookingStatus] = Field(default_factory=list)
    sources: list[ReservationSource] = Field(default_factory=list)
    property_ids: list[str] = Field(default_factory=list)
    min_amount: Optional[Decimal] = Field(None, ge=0)
    max_amount: Optional[Decimal] = Field(None, ge=0)
    guest_name: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @model_validator(mode="after")
    def check_ranges(self) -> "ReservationFilters":
        if self.check_in_from and self.check_in_to and self.check_in_from > self.check_in_to:
            raise ValueError("check_in_from must not be after check_in_to")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("min_amount must not exceed max_amount")
        return self


class ReservationView(CamelModel):
    """Public projection of a reservation with denormalized property and guest fields."""

    id: str
    property_id: str
    property_name: str = ""
    property_type: str = ""
    property_address: str = ""
    property_city: str = ""
    guest_id: str
    guest_name: str = ""
    guest_email: str = ""
    guest_phone: str = ""
    check_in: date
    check_out: date
    booking_status: BookingStatus = Field(..., alias="status")
    payment_status: PaymentStatus
    occupancy_status: OccupancyStatus = Field(..., alias="guestStatus")
    total_amount: Decimal
    paid_amount: Decimal
    outstanding_balance: Decimal
    guest_count: int
    nights: int
    special_requests: Optional[str] = None
    source: ReservationSource
    external_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ReservationPage(CamelModel):
    reservations: list[ReservationView]
    pagination: Pagination


class ReservationStats(CamelModel):
    """Aggregate counts, revenue and occupancy over a filtered reservation set."""

    total_reservations: int = 0
    confirmed_reservations: int = 0
    pending_reservations: int = 0
    cancelled_reservations: int = 0
    completed_reservations: int = 0
    no_show_reservations: int = 0
    total_revenue: Decimal = Decimal("0")
    average_amount: Decimal = Decimal("0")
    occupancy_rate: float = 0.0


class SourceCount(CamelModel):
    source: ReservationSource
    count: int


class CalendarEvent(CamelModel):
    id: str
    title: str
    start: date
    end: date
    property_id: str
    property_name: str
    status: BookingStatus
    guest_status: OccupancyStatus
    total_amount: Decimal
    guest_count: int


class AvailabilityDayView(CamelModel):
    property_id: str
    day: date = Field(..., alias="date")
    status: AvailabilityStatus
    booked_count: int


class AvailableProperty(CamelModel):
    id: str
    name: str
    property_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    capacity: int
    nightly_rate: Decimal
