"""SQLAlchemy models for bookable retreats and their scheduled activities."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.sql import func

from retreat_booking.models.base import Base, fk, table_args


class Retreat(Base):
    """
    ORM model for a bookable retreat offering.

    A retreat has a fixed guest capacity shared by every reservation whose
    stay overlaps another, plus the instructor and location it occupies for
    its whole offering window. Conflict detection compares those two
    resources across overlapping retreats.
    """

    __tablename__ = "retreats"
    __table_args__ = table_args(
        CheckConstraint("capacity > 0", name="ck_retreats_capacity_positive"),
        CheckConstraint("start_date <= end_date", name="ck_retreats_date_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    instructor = Column(String, nullable=True)
    location = Column(String, nullable=True)
    price = Column(Numeric(12, 2), nullable=False, server_default=text("0"))
    status = Column(String, nullable=False, server_default=text("'ACTIVE'"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class ScheduleActivity(Base):
    """
    ORM model for one activity on a retreat's day-by-day schedule.

    `day` is 1-based relative to the retreat start date; `time` is "HH:MM".
    """

    __tablename__ = "schedule_activities"
    __table_args__ = table_args(
        CheckConstraint("day >= 1", name="ck_schedule_activities_day"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    retreat_id = Column(
        Integer,
        ForeignKey(fk("retreats.id"), ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day = Column(Integer, nullable=False)
    time = Column(String(5), nullable=False)
    name = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False, server_default=text("60"))
    instructor = Column(String, nullable=True)
    location = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False, server_default=text("20"))
