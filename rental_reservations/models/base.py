from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Check constraints are declared with short names ("date_range") and expanded
# here, so the ORM and the alembic migrations agree on the final names.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}


class Base(DeclarativeBase):
    """Base class for the reservation ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
