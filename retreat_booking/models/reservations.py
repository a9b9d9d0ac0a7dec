# models/reservations.py

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args


class Reservation(Base):
    """
    ORM model for a guest's claim against a retreat's capacity.

    Only CONFIRMED and COMPLETED reservations count toward capacity. A
    reservation with payment history is never physically deleted; it is
    cancelled instead. paid_amount has no upper bound (overpayment is valid).
    """

    __tablename__ = "reservations"
    __table_args__ = table_args(
        CheckConstraint("number_of_guests > 0", name="ck_reservations_party_size"),
        CheckConstraint("check_in_date <= check_out_date", name="ck_reservations_date_order"),
        CheckConstraint("paid_amount >= 0", name="ck_reservations_paid_amount"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    retreat_id = Column(
        Integer,
        ForeignKey(fk("retreats.id"), ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_id = Column(
        Integer,
        ForeignKey(fk("guests.id"), ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    status = Column(String, nullable=False, server_default=text("'PENDING'"), index=True)
    total_amount = Column(Numeric(12, 2), nullable=False, server_default=text("0"))
    paid_amount = Column(Numeric(12, 2), nullable=False, server_default=text("0"))
    payment_status = Column(String, nullable=False, server_default=text("'PENDING'"))
    payment_method = Column(String, nullable=True)
    room_number = Column(String, nullable=True)
    special_requests = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    actual_check_in_time = Column(DateTime(timezone=True), nullable=True)
    check_in_staff = Column(String, nullable=True)
    actual_check_out_time = Column(DateTime(timezone=True), nullable=True)
    check_out_staff = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
