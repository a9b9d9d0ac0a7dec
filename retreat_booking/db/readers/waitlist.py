from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from retreat_booking.models.waitlist import WaitlistEntry


def get_waitlist_entry(
    conn: Connection, entry_id: int, lock: bool = False
) -> Optional[dict[str, Any]]:
    stmt = select(WaitlistEntry.__table__).where(WaitlistEntry.id == entry_id)
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_waiting_entries(conn: Connection, retreat_id: int) -> list[dict[str, Any]]:
    """
    Fetch WAITING entries for a retreat in service order.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        retreat_id (int): Retreat ID.

    Returns:
        list[dict[str, Any]]: Entries ordered first come, first served
    """
    stmt = (
        select(WaitlistEntry.__table__)
        .where(WaitlistEntry.retreat_id == retreat_id)
        .where(WaitlistEntry.status == "WAITING")
        .order_by(WaitlistEntry.created_at, WaitlistEntry.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
