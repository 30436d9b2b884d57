from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from rental_reservations.config import SCHEMA
from rental_reservations.models.base import Base


class AvailabilityDay(Base):
    """
    ORM model for the per-property, per-day availability calendar.

    Rows are created lazily the first time a day is booked or released.
    booked_count is the number of reservations currently holding the night;
    status is BOOKED while the count is positive and AVAILABLE at zero.
    """

    __tablename__ = "availability"
    __table_args__ = (
        CheckConstraint("booked_count >= 0", name="booked_count"),
        {"schema": SCHEMA},
    )

    property_id = Column(
        String(64),
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        primary_key=True,
    )
    date = Column(Date, primary_key=True)
    status = Column(String(16), nullable=False)
    booked_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
