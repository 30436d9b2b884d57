from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from rental_reservations.config import SCHEMA
from rental_reservations.models.base import Base


class AuditRecord(Base):
    """
    ORM model for the append-only audit log.

    One row is written per mutating lifecycle operation, holding JSON snapshots
    of the reservation before and after the change. Rows are never updated or
    deleted by the application.
    """

    __tablename__ = "audit_log"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(String(64), nullable=False, index=True)
    action = Column(String(64), nullable=False)
    entity_type = Column(String(32), nullable=False, default="RESERVATION")
    entity_id = Column(String(64), nullable=False, index=True)
    before = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    after = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
