from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args


class LoyaltyTransaction(Base):
    """ORM model for one loyalty points movement (EARNED or REDEEMED)."""

    __tablename__ = "loyalty_transactions"
    __table_args__ = table_args()

    id = Column(Integer, primary_key=True, autoincrement=True)
    guest_id = Column(
        Integer,
        ForeignKey(fk("guests.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reservation_id = Column(
        Integer,
        ForeignKey(fk("reservations.id"), ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    type = Column(String, nullable=False)
    points = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
