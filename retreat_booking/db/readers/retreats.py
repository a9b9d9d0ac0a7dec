from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from retreat_booking.models.reservations import Reservation
from retreat_booking.models.retreats import Retreat
from retreat_booking.utils.intervals import COUNTED_STATUSES


def get_retreat(conn: Connection, retreat_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a retreat by ID.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        retreat_id (int): Retreat ID.
        lock (bool): If True, take a row lock (SELECT ... FOR UPDATE) that is
            held until the surrounding transaction ends.

    Returns:
        Optional[dict[str, Any]]: Retreat row or None if not found
    """
    stmt = select(Retreat.__table__).where(Retreat.id == retreat_id)
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_retreats_in_window(
    conn: Connection, window_start: date, window_end: date
) -> list[dict[str, Any]]:
    """
    Fetch non-cancelled retreats whose offering window intersects [window_start, window_end].

    Args:
        conn (Connection): SQLAlchemy DB connection.
        window_start (date): First day of the window.
        window_end (date): Last day of the window.

    Returns:
        list[dict[str, Any]]: Retreat rows ordered by start date
    """
    stmt = (
        select(Retreat.__table__)
        .where(Retreat.start_date <= window_end)
        .where(Retreat.end_date >= window_start)
        .where(Retreat.status != "CANCELLED")
        .order_by(Retreat.start_date, Retreat.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_committed_guests(conn: Connection, retreat_ids: list[int]) -> dict[int, int]:
    """
    Sum party sizes of capacity-counting reservations per retreat.

    Returns:
        dict[int, int]: retreat_id -> committed guests (retreats with none are omitted)
    """
    if not retreat_ids:
        return {}
    stmt = (
        select(Reservation.retreat_id, func.sum(Reservation.number_of_guests))
        .where(Reservation.retreat_id.in_(retreat_ids))
        .where(Reservation.status.in_(COUNTED_STATUSES))
        .group_by(Reservation.retreat_id)
    )
    return {retreat_id: int(total or 0) for retreat_id, total in conn.execute(stmt)}
