from typing import Optional

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from retreat_booking.errors import LedgerWriteFailure
from retreat_booking.models.ledger import LedgerEntry
from retreat_booking.services.ledger_ops import (
    BOOKING_INCOME_CATEGORY,
    BOOKING_INCOME_TYPE,
    LedgerOp,
)
from retreat_booking.services.outcomes import ReservationView
from retreat_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def apply_ledger_op(
    engine: Engine,
    reservation: ReservationView,
    op: LedgerOp,
    reference: Optional[str] = None,
) -> int:
    """
    Create or update the booking-income entry for a reservation.

    Runs in its own transaction, after the reservation's payment fields are
    committed.

    Args:
        engine (Engine): SQLAlchemy engine.
        reservation (ReservationView): Reservation the entry mirrors.
        op (LedgerOp): Operation from the reconciliation engine.
        reference (Optional[str]): External payment reference.

    Returns:
        int: Ledger entry ID

    Raises:
        LedgerWriteFailure: If the database rejects the write
    """
    now = utc_now()
    try:
        with engine.begin() as conn:
            if op.entry_id is not None:
                values = {"amount": op.amount, "status": op.status, "updated_at": now}
                if reference:
                    values["reference"] = reference
                conn.execute(
                    update(LedgerEntry).where(LedgerEntry.id == op.entry_id).values(**values)
                )
                entry_id = op.entry_id
            else:
                result = conn.execute(
                    insert(LedgerEntry).values(
                        type=BOOKING_INCOME_TYPE,
                        category=BOOKING_INCOME_CATEGORY,
                        amount=op.amount,
                        description=f"Retreat booking payment - reservation #{reservation.id}",
                        reference=reference or reservation.payment_method,
                        reservation_id=reservation.id,
                        retreat_id=reservation.retreat_id,
                        status=op.status,
                        created_at=now,
                        updated_at=now,
                    )
                )
                entry_id = int(result.inserted_primary_key[0])
    except SQLAlchemyError as e:
        raise LedgerWriteFailure(reservation.id, e) from e

    logger.info(
        "ledger_entry_mirrored",
        reservation_id=reservation.id,
        ledger_entry_id=entry_id,
        action=op.action,
        amount=str(op.amount),
        status=op.status,
    )
    return entry_id
