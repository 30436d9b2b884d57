"""SQLAlchemy models for the property and guest directory."""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from rental_reservations.config import SCHEMA
from rental_reservations.models.base import Base


class Property(Base):
    """
    ORM model for rentable properties.

    Properties are owned by the property-management side of the platform; the
    reservation core only reads them for existence checks, capacity, the
    nightly rate used for pricing and the owner used for access scoping. The
    row also serves as the per-property lock taken by every booking write.
    """

    __tablename__ = "properties"
    __table_args__ = {"schema": SCHEMA}

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    property_type = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False, default=1)
    nightly_rate = Column(Numeric(12, 2), nullable=False)
    owner_id = Column(String(64), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Guest(Base):
    """ORM model for guests that can hold reservations."""

    __tablename__ = "guests"
    __table_args__ = {"schema": SCHEMA}

    id = Column(String(64), primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
