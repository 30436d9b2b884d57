"""Create property, guest, reservation, availability and audit tables

Revision ID: 3a1f9c2d7b10
Revises:
Create Date: 2026-10-17 09:12:31.418204

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3a1f9c2d7b10"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "rentals"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "properties",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("property_type", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("nightly_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_properties_owner_id", "properties", ["owner_id"], schema=SCHEMA)

    op.create_table(
        "guests",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_guests_email", "guests", ["email"], schema=SCHEMA)

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "property_id",
            sa.String(64),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "guest_id",
            sa.String(64),
            sa.ForeignKey(f"{SCHEMA}.guests.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("check_in", sa.Date(), nullable=False),
        sa.Column("check_out", sa.Date(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("booking_status", sa.String(32), nullable=False),
        sa.Column("payment_status", sa.String(32), nullable=False),
        sa.Column("occupancy_status", sa.String(32), nullable=False),
        sa.Column("source", sa.String(32), nullable=False),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("special_requests", sa.String(), nullable=True),
        sa.Column("calendar_held", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("check_out > check_in", name="ck_reservations_date_range"),
        sa.CheckConstraint("guest_count >= 1", name="ck_reservations_guest_count"),
        sa.CheckConstraint("total_amount >= 0", name="ck_reservations_total_amount"),
        sa.CheckConstraint("paid_amount >= 0", name="ck_reservations_paid_amount"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_reservations_property_dates",
        "reservations",
        ["property_id", "check_in", "check_out"],
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_reservations_guest_id", "reservations", ["guest_id"], schema=SCHEMA)
    op.create_index(
        "ix_rentals_reservations_booking_status", "reservations", ["booking_status"], schema=SCHEMA
    )
    op.create_index("ix_rentals_reservations_source", "reservations", ["source"], schema=SCHEMA)

    op.create_table(
        "availability",
        sa.Column(
            "property_id",
            sa.String(64),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("date", sa.Date(), primary_key=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("booked_count", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("booked_count >= 0", name="ck_availability_booked_count"),
        schema=SCHEMA,
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(32), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("before", postgresql.JSONB(), nullable=True),
        sa.Column("after", postgresql.JSONB(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        schema=SCHEMA,
    )
    op.create_index("ix_rentals_audit_log_actor_id", "audit_log", ["actor_id"], schema=SCHEMA)
    op.create_index("ix_rentals_audit_log_entity_id", "audit_log", ["entity_id"], schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("audit_log", schema=SCHEMA)
    op.drop_table("availability", schema=SCHEMA)
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_table("guests", schema=SCHEMA)
    op.drop_table("properties", schema=SCHEMA)
