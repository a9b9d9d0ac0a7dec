"""
Payment reconciliation engine.

`reconcile` is pure: given a reservation snapshot, the new paid amount and
the reservation's existing booking-income ledger entry, it derives the new
payment status, the reservation status and the ledger operation that keeps
the entry mirroring the paid amount. The orchestrator persists the result.

The ledger entry is derived data. `repair_ledger_drift` re-applies the
ledger operation for any reservation whose entry disagrees with its
paid_amount, closing the window left when a best-effort ledger write fails.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy.engine import Engine

from retreat_booking.db.readers.ledger import get_ledger_drift
from retreat_booking.db.writers import ledger as ledger_writer
from retreat_booking.errors import BookingValidationError, LedgerWriteFailure
from retreat_booking.metrics import ledger_drift_repaired_total, ledger_write_failures_total
from retreat_booking.services.ledger_ops import LedgerOp
from retreat_booking.services.outcomes import ReservationView

logger = structlog.get_logger(__name__)

PAYMENT_STATUSES = ("PENDING", "PARTIAL", "PAID")
STICKY_STATUSES = frozenset({"CANCELLED", "COMPLETED"})


@dataclass(frozen=True)
class ReconciliationResult:
    payment_status: str
    delta: Decimal
    reservation_status: str
    paid_amount: Decimal
    payment_method: Optional[str]
    ledger_op: Optional[LedgerOp]


def derive_payment_status(paid_amount: Decimal, total_amount: Decimal) -> str:
    """PAID once the total is covered, PARTIAL for any positive amount, else PENDING."""
    if paid_amount >= total_amount:
        return "PAID"
    if paid_amount > 0:
        return "PARTIAL"
    return "PENDING"


def ledger_op_for(
    paid_amount: Decimal,
    payment_status: str,
    existing_entry: Optional[Mapping[str, Any]],
) -> Optional[LedgerOp]:
    """
    Build the ledger operation that makes the entry equal `paid_amount`.

    Returns None when there is no entry and nothing has been paid.
    """
    entry_status = "PROCESSED" if payment_status == "PAID" else "PENDING"
    if existing_entry is not None:
        return LedgerOp(
            action="update",
            amount=paid_amount,
            status=entry_status,
            entry_id=existing_entry["id"],
        )
    if paid_amount > 0:
        return LedgerOp(action="create", amount=paid_amount, status=entry_status)
    return None


def reconcile(
    reservation: ReservationView,
    new_paid_amount: Decimal,
    method: Optional[str] = None,
    explicit_status: Optional[str] = None,
    existing_entry: Optional[Mapping[str, Any]] = None,
) -> ReconciliationResult:
    """
    Reconcile a reservation's payment fields against a new paid amount.

    Args:
        reservation: Current reservation snapshot
        new_paid_amount: Absolute amount paid so far (not an increment)
        method: Payment method; keeps the current one when omitted
        explicit_status: Caller-supplied payment status, overrides derivation
        existing_entry: The reservation's INCOME/RETREAT_BOOKING entry, if any

    Returns:
        ReconciliationResult: New fields plus the ledger op (None when delta is zero)

    Raises:
        BookingValidationError: If the amount is negative or the status unknown
    """
    new_paid_amount = Decimal(new_paid_amount)
    if new_paid_amount < 0:
        raise BookingValidationError("paid_amount", "paid amount cannot be negative")
    if explicit_status is not None and explicit_status not in PAYMENT_STATUSES:
        raise BookingValidationError(
            "payment_status", f"payment status must be one of {', '.join(PAYMENT_STATUSES)}"
        )

    delta = new_paid_amount - reservation.paid_amount
    payment_status = explicit_status or derive_payment_status(
        new_paid_amount, reservation.total_amount
    )

    reservation_status = reservation.status
    if payment_status == "PAID" and reservation.status not in STICKY_STATUSES:
        reservation_status = "CONFIRMED"

    ledger_op = (
        ledger_op_for(new_paid_amount, payment_status, existing_entry) if delta != 0 else None
    )

    return ReconciliationResult(
        payment_status=payment_status,
        delta=delta,
        reservation_status=reservation_status,
        paid_amount=new_paid_amount,
        payment_method=method if method is not None else reservation.payment_method,
        ledger_op=ledger_op,
    )


def apply_ledger_op_best_effort(
    engine: Engine, reservation: ReservationView, op: LedgerOp, reference: Optional[str] = None
) -> tuple[Optional[int], list[str]]:
    """
    Apply a ledger op in its own transaction, reporting failure as a warning.

    Returns:
        tuple: (ledger entry id or None, warnings)
    """
    try:
        entry_id = ledger_writer.apply_ledger_op(engine, reservation, op, reference=reference)
    except LedgerWriteFailure as e:
        ledger_write_failures_total.inc()
        logger.error(
            "ledger_write_failed",
            reservation_id=reservation.id,
            action=op.action,
            amount=str(op.amount),
            error=str(e.cause),
        )
        return None, [f"LedgerWriteFailure: {e}"]
    return entry_id, []


def repair_ledger_drift(engine: Engine) -> list[int]:
    """
    Re-mirror booking-income entries that disagree with paid_amount.

    Args:
        engine: SQLAlchemy engine

    Returns:
        list[int]: IDs of reservations whose ledger entry was repaired
    """
    with engine.connect() as conn:
        drifted = get_ledger_drift(conn)

    repaired: list[int] = []
    for row in drifted:
        reservation = ReservationView.from_row(row)
        existing = {"id": row["entry_id"]} if row["entry_id"] is not None else None
        op = ledger_op_for(reservation.paid_amount, reservation.payment_status, existing)
        if op is None:
            continue
        _, warnings = apply_ledger_op_best_effort(engine, reservation, op)
        if warnings:
            continue
        ledger_drift_repaired_total.inc()
        repaired.append(reservation.id)
        logger.info(
            "ledger_drift_repaired",
            reservation_id=reservation.id,
            paid_amount=str(reservation.paid_amount),
            previous_amount=str(row["entry_amount"]) if row["entry_amount"] is not None else None,
        )

    logger.info("ledger_drift_scan_complete", drifted=len(drifted), repaired=len(repaired))
    return repaired
