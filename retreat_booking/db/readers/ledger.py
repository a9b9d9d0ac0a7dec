from typing import Any, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.engine import Connection

from retreat_booking.models.ledger import LedgerEntry
from retreat_booking.models.reservations import Reservation

BOOKING_INCOME = and_(LedgerEntry.type == "INCOME", LedgerEntry.category == "RETREAT_BOOKING")


def get_booking_income_entry(
    conn: Connection, reservation_id: int, lock: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch the INCOME/RETREAT_BOOKING entry mirroring a reservation's payments.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        reservation_id (int): Reservation ID.
        lock (bool): Take a row lock on the entry.

    Returns:
        Optional[dict[str, Any]]: Ledger row or None if no payment has been mirrored yet
    """
    stmt = select(LedgerEntry.__table__).where(
        LedgerEntry.reservation_id == reservation_id, BOOKING_INCOME
    )
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_ledger_entries(conn: Connection, reservation_id: int) -> list[dict[str, Any]]:
    """All ledger entries referencing a reservation, oldest first."""
    stmt = (
        select(LedgerEntry.__table__)
        .where(LedgerEntry.reservation_id == reservation_id)
        .order_by(LedgerEntry.created_at, LedgerEntry.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def count_ledger_entries(conn: Connection, reservation_id: int) -> int:
    stmt = select(func.count()).select_from(LedgerEntry).where(
        LedgerEntry.reservation_id == reservation_id
    )
    return int(conn.execute(stmt).scalar_one())


def get_ledger_drift(conn: Connection) -> list[dict[str, Any]]:
    """
    Find reservations whose booking-income entry does not mirror paid_amount.

    A reservation drifts when it has been paid but has no entry, or when its
    entry's amount differs from paid_amount.

    Returns:
        list[dict[str, Any]]: Reservation rows plus `entry_id` and `entry_amount`
    """
    stmt = (
        select(
            Reservation.__table__,
            LedgerEntry.id.label("entry_id"),
            LedgerEntry.amount.label("entry_amount"),
        )
        .outerjoin(
            LedgerEntry,
            and_(LedgerEntry.reservation_id == Reservation.id, BOOKING_INCOME),
        )
        .where(
            or_(
                and_(LedgerEntry.id.is_(None), Reservation.paid_amount > 0),
                and_(LedgerEntry.id.is_not(None), LedgerEntry.amount != Reservation.paid_amount),
            )
        )
        .order_by(Reservation.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
