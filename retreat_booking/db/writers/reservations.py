from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from retreat_booking.models.reservations import Reservation
from retreat_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_reservation(conn: Connection, values: dict[str, Any]) -> int:
    """
    Insert a reservation row.

    Args:
        conn (Connection): SQLAlchemy DB connection (inside the admission transaction).
        values (dict[str, Any]): Column values.

    Returns:
        int: New reservation ID
    """
    now = utc_now()
    result = conn.execute(
        insert(Reservation).values(**values, created_at=now, updated_at=now)
    )
    reservation_id = int(result.inserted_primary_key[0])
    logger.debug("reservation_inserted", reservation_id=reservation_id)
    return reservation_id


def update_reservation_fields(conn: Connection, reservation_id: int, values: dict[str, Any]) -> None:
    """
    Update columns on an existing reservation.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.
        values (dict[str, Any]): Columns to set; updated_at is added.
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .values(**values, updated_at=utc_now())
    )
    conn.execute(stmt)


def mark_checked_in(
    conn: Connection,
    reservation_id: int,
    checked_in_at: datetime,
    staff_member: str,
    room_number: Optional[str],
    notes: Optional[str],
) -> bool:
    """
    Record the check-in, but only if the reservation is not checked in yet.

    The `actual_check_in_time IS NULL` predicate makes the update a
    compare-and-set: of two concurrent check-ins exactly one matches a row.

    Returns:
        bool: True if this call performed the check-in
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .where(Reservation.actual_check_in_time.is_(None))
        .values(
            actual_check_in_time=checked_in_at,
            check_in_staff=staff_member,
            room_number=room_number,
            notes=notes,
            updated_at=utc_now(),
        )
    )
    return conn.execute(stmt).rowcount == 1


def mark_checked_out(conn: Connection, reservation_id: int, values: dict[str, Any]) -> bool:
    """
    Record the check-out if the guest is checked in and not yet checked out.

    Returns:
        bool: True if this call performed the check-out
    """
    stmt = (
        update(Reservation)
        .where(Reservation.id == reservation_id)
        .where(Reservation.actual_check_in_time.is_not(None))
        .where(Reservation.actual_check_out_time.is_(None))
        .values(**values, updated_at=utc_now())
    )
    return conn.execute(stmt).rowcount == 1


def delete_reservation(conn: Connection, reservation_id: int) -> None:
    """
    Permanently delete a reservation.

    Callers must have verified it has no ledger or loyalty history.
    """
    conn.execute(delete(Reservation).where(Reservation.id == reservation_id))
