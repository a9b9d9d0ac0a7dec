from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args


class GuestCommunication(Base):
    """
    ORM model for the guest communication log.

    Check-in, check-out and tier upgrades each leave one record here; it
    doubles as the audit trail for those transitions.
    """

    __tablename__ = "guest_communications"
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
        ForeignKey(fk("reservations.id"), ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    direction = Column(String, nullable=False)
    channel = Column(String, nullable=False)
    staff_member = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
