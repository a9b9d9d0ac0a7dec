from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, text
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, table_args


class Guest(Base):
    """
    ORM model for a retreat guest and their loyalty balance.

    loyalty_points is only ever incremented by the loyalty writer; redemption
    happens outside this service.
    """

    __tablename__ = "guests"
    __table_args__ = table_args(
        CheckConstraint("loyalty_points >= 0", name="ck_guests_loyalty_points"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, server_default=text("''"))
    email = Column(String, nullable=True, index=True)
    loyalty_points = Column(Integer, nullable=False, server_default=text("0"))
    loyalty_tier = Column(String, nullable=False, server_default=text("'BRONZE'"))
    loyalty_program_active = Column(Boolean, nullable=False, server_default=text("FALSE"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
