from sqlalchemy.orm import DeclarativeBase

from retreat_booking.config import SCHEMA


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All booking tables share one optional schema taken from configuration, so
    the same models serve PostgreSQL (schema-qualified) and SQLite (unqualified).
    """

    pass


def table_args(*constraints: object) -> tuple:
    """Build __table_args__ with the configured schema appended."""
    return (*constraints, {"schema": SCHEMA})


def fk(target: str) -> str:
    """Qualify a "table.column" foreign key target with the configured schema."""
    return f"{SCHEMA}.{target}" if SCHEMA else target
