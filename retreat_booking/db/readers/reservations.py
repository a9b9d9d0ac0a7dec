"""
Reservation queries built from typed filter functions.

Each filter returns a SQLAlchemy predicate for one dimension; callers combine
them with `select_reservations(conn, by_retreat(7), overlapping(a, b), ...)`.
"""

from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import ColumnElement

from retreat_booking.models.reservations import Reservation
from retreat_booking.utils.intervals import COUNTED_STATUSES, Stay


def by_retreat(retreat_id: int) -> ColumnElement[bool]:
    return Reservation.retreat_id == retreat_id


def overlapping(start: date, end: date) -> ColumnElement[bool]:
    """Stays sharing at least one day with [start, end] (inclusive)."""
    return (Reservation.check_in_date <= end) & (Reservation.check_out_date >= start)


def with_statuses(statuses: Iterable[str]) -> ColumnElement[bool]:
    return Reservation.status.in_(list(statuses))


def select_reservations(
    conn: Connection, *filters: ColumnElement[bool], lock: bool = False
) -> list[dict[str, Any]]:
    """
    Fetch reservations matching every filter.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        *filters: Predicates from the filter functions in this module.
        lock (bool): Take row locks on the matched reservations.

    Returns:
        list[dict[str, Any]]: Reservation rows ordered by ID
    """
    stmt = select(Reservation.__table__).where(*filters).order_by(Reservation.id)
    if lock:
        stmt = stmt.with_for_update()
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_reservation(
    conn: Connection, reservation_id: int, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a single reservation by ID.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.
        lock (bool): Take a row lock held until the transaction ends.

    Returns:
        Optional[dict[str, Any]]: Reservation row or None if not found
    """
    rows = select_reservations(conn, Reservation.id == reservation_id, lock=lock)
    return rows[0] if rows else None


def get_committed_stays(
    conn: Connection, retreat_id: int, start: date, end: date
) -> list[Stay]:
    """
    Snapshot of capacity-counting stays overlapping [start, end] for a retreat.

    Must be called inside the admission transaction, after the retreat lock
    is taken, for the snapshot to be stable.
    """
    rows = select_reservations(
        conn,
        by_retreat(retreat_id),
        overlapping(start, end),
        with_statuses(COUNTED_STATUSES),
    )
    return [
        Stay(
            start=row["check_in_date"],
            end=row["check_out_date"],
            party_size=row["number_of_guests"],
            status=row["status"],
            reservation_id=row["id"],
        )
        for row in rows
    ]
