# models/reservations.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.sql import func

from rental_reservations.config import SCHEMA
from rental_reservations.models.base import Base


class Reservation(Base):
    """
    ORM model for guest reservations (bookings).

    A reservation covers the nights [check_in, check_out) of one property and
    carries three independent status axes: booking_status, payment_status and
    occupancy_status. total_amount is derived from the property's nightly rate
    and is only rewritten when the dates or the property change.

    calendar_held records whether the reservation's nights are currently
    counted on the availability calendar, so a release is applied once only.
    """

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="date_range"),
        CheckConstraint("guest_count >= 1", name="guest_count"),
        CheckConstraint("total_amount >= 0", name="total_amount"),
        CheckConstraint("paid_amount >= 0", name="paid_amount"),
        Index("ix_reservations_property_dates", "property_id", "check_in", "check_out"),
        {"schema": SCHEMA},
    )

    id = Column(String(64), primary_key=True)
    property_id = Column(
        String(64),
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
    )
    guest_id = Column(
        String(64),
        ForeignKey(f"{SCHEMA}.guests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False, default=1)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    booking_status = Column(String(32), nullable=False, index=True)
    payment_status = Column(String(32), nullable=False)
    occupancy_status = Column(String(32), nullable=False)
    source = Column(String(32), nullable=False, index=True)
    external_id = Column(String, nullable=True)
    special_requests = Column(String, nullable=True)
    calendar_held = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
