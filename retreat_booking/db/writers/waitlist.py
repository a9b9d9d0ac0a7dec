from typing import Any

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from retreat_booking.models.waitlist import WaitlistEntry
from retreat_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_waitlist_entry(conn: Connection, values: dict[str, Any]) -> int:
    """
    Insert a WAITING entry.

    Returns:
        int: New waitlist entry ID
    """
    result = conn.execute(insert(WaitlistEntry).values(**values, created_at=utc_now()))
    return int(result.inserted_primary_key[0])


def mark_promoted(conn: Connection, entry_id: int, reservation_id: int) -> None:
    conn.execute(
        update(WaitlistEntry)
        .where(WaitlistEntry.id == entry_id)
        .values(status="PROMOTED", promoted_reservation_id=reservation_id)
    )
    logger.info("waitlist_entry_promoted", entry_id=entry_id, reservation_id=reservation_id)


def mark_removed(conn: Connection, entry_id: int) -> None:
    conn.execute(
        update(WaitlistEntry).where(WaitlistEntry.id == entry_id).values(status="REMOVED")
    )


def clear_promoted_reservation(conn: Connection, reservation_id: int) -> None:
    """Detach waitlist entries from a reservation that is about to be deleted."""
    conn.execute(
        update(WaitlistEntry)
        .where(WaitlistEntry.promoted_reservation_id == reservation_id)
        .values(promoted_reservation_id=None)
    )
