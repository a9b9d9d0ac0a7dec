"""SQLAlchemy model for the derived financial ledger."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args

BOOKING_INCOME_PREDICATE = text("type = 'INCOME' AND category = 'RETREAT_BOOKING'")


class LedgerEntry(Base):
    """
    ORM model for a financial transaction (income or expense).

    Booking income entries mirror a reservation's paid_amount: at most one
    INCOME/RETREAT_BOOKING entry exists per reservation (partial unique index),
    and its amount is rewritten on every payment change. Expense entries carry
    free-form categories and no reservation reference.
    """

    __tablename__ = "ledger_entries"
    __table_args__ = table_args(
        Index(
            "uq_ledger_entries_booking_income",
            "reservation_id",
            unique=True,
            postgresql_where=BOOKING_INCOME_PREDICATE,
            sqlite_where=BOOKING_INCOME_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    reference = Column(String, nullable=True)
    reservation_id = Column(
        Integer,
        ForeignKey(fk("reservations.id"), ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    retreat_id = Column(Integer, ForeignKey(fk("retreats.id")), nullable=True)
    status = Column(String, nullable=False, server_default=text("'PENDING'"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
