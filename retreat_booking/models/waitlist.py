from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args


class WaitlistEntry(Base):
    """
    ORM model for a guest waiting for capacity on a retreat.

    Entries are served first come, first served (created_at, then id). A
    promoted entry points at the CONFIRMED reservation created for it.
    """

    __tablename__ = "waitlist_entries"
    __table_args__ = table_args(
        CheckConstraint("number_of_guests > 0", name="ck_waitlist_entries_party_size"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    retreat_id = Column(
        Integer,
        ForeignKey(fk("retreats.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id = Column(Integer, ForeignKey(fk("guests.id"), ondelete="CASCADE"), nullable=False)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    special_requests = Column(String, nullable=True)
    priority = Column(String, nullable=False, server_default=text("'NORMAL'"))
    status = Column(String, nullable=False, server_default=text("'WAITING'"))
    promoted_reservation_id = Column(Integer, ForeignKey(fk("reservations.id")), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
