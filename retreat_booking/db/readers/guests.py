from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from retreat_booking.models.guests import Guest
from retreat_booking.models.loyalty import LoyaltyTransaction


def get_guest(conn: Connection, guest_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a guest with their loyalty balance.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        guest_id (int): Guest ID.
        lock (bool): Take a row lock so balance updates serialize.

    Returns:
        Optional[dict[str, Any]]: Guest row or None if not found
    """
    stmt = select(Guest.__table__).where(Guest.id == guest_id)
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_loyalty_transactions(
    conn: Connection, guest_id: Optional[int] = None, reservation_id: Optional[int] = None
) -> list[dict[str, Any]]:
    stmt = select(LoyaltyTransaction.__table__).order_by(LoyaltyTransaction.id)
    if guest_id is not None:
        stmt = stmt.where(LoyaltyTransaction.guest_id == guest_id)
    if reservation_id is not None:
        stmt = stmt.where(LoyaltyTransaction.reservation_id == reservation_id)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def count_loyalty_transactions(conn: Connection, reservation_id: int) -> int:
    stmt = select(func.count()).select_from(LoyaltyTransaction).where(
        LoyaltyTransaction.reservation_id == reservation_id
    )
    return int(conn.execute(stmt).scalar_one())
