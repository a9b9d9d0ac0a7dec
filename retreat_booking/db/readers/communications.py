from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from retreat_booking.models.communications import GuestCommunication


def get_guest_communications(conn: Connection, guest_id: int) -> list[dict[str, Any]]:
    """Communication log for a guest, oldest first."""
    stmt = (
        select(GuestCommunication.__table__)
        .where(GuestCommunication.guest_id == guest_id)
        .order_by(GuestCommunication.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
