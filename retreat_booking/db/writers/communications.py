from typing import Optional

from sqlalchemy import insert
from sqlalchemy.engine import Connection

from retreat_booking.models.communications import GuestCommunication
from retreat_booking.utils.datetime import utc_now


def insert_communication(
    conn: Connection,
    guest_id: int,
    type: str,
    subject: str,
    message: str,
    channel: str,
    staff_member: str,
    reservation_id: Optional[int] = None,
    direction: str = "OUTBOUND",
) -> None:
    """
    Append a record to the guest communication log.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        guest_id (int): Guest the record belongs to.
        type (str): BOOKING_RELATED or MARKETING.
        subject (str): Short subject line.
        message (str): Body text.
        channel (str): e.g. "in-person", "email".
        staff_member (str): Who performed the action.
        reservation_id (Optional[int]): Related reservation, if any.
        direction (str): OUTBOUND or INBOUND.
    """
    conn.execute(
        insert(GuestCommunication).values(
            guest_id=guest_id,
            reservation_id=reservation_id,
            type=type,
            subject=subject,
            message=message,
            direction=direction,
            channel=channel,
            staff_member=staff_member,
            created_at=utc_now(),
        )
    )
