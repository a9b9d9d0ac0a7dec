"""
Booking orchestrator.

Owns the reservation lifecycle: create, update, payment, check-in,
check-out and cancellation. Every capacity decision runs under the
retreat's admission lock with the retreat row locked in the same database
transaction as the snapshot read and the write, so two admissions for one
retreat can never both see the same free seats.

State machine:
    PENDING -> CONFIRMED -> COMPLETED
    PENDING | CONFIRMED -> CANCELLED
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

import structlog
from sqlalchemy.engine import Connection, Engine

from retreat_booking.config import DEFAULT_STAFF_MEMBER
from retreat_booking.db.readers.guests import count_loyalty_transactions, get_guest
from retreat_booking.db.readers.ledger import (
    count_ledger_entries,
    get_booking_income_entry,
    get_ledger_entries,
)
from retreat_booking.db.readers.reservations import get_committed_stays, get_reservation
from retreat_booking.db.readers.retreats import get_retreat
from retreat_booking.db.writers.communications import insert_communication
from retreat_booking.db.writers.loyalty import record_points, set_loyalty_tier
from retreat_booking.db.writers.reservations import (
    delete_reservation,
    insert_reservation,
    mark_checked_in,
    mark_checked_out,
    update_reservation_fields,
)
from retreat_booking.db.writers.waitlist import clear_promoted_reservation
from retreat_booking.errors import BookingValidationError, NotFoundError
from retreat_booking.metrics import (
    admission_duration,
    admissions_total,
    check_ins_total,
    check_outs_total,
    loyalty_points_awarded_total,
    payment_updates_total,
)
from retreat_booking.services.admission_locks import retreat_admission_lock
from retreat_booking.services.capacity import admit, validate_stay
from retreat_booking.services.loyalty import LoyaltyAccount, accrue, next_tier, review_bonus
from retreat_booking.services.outcomes import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    CapacityExceeded,
    CheckOutResult,
    HasDependentLedgerEntries,
    InvalidStateTransition,
    NotCheckedIn,
    PaymentSummary,
    PaymentUpdateResult,
    ReservationView,
)
from retreat_booking.services.payments import apply_ledger_op_best_effort, reconcile
from retreat_booking.utils.datetime import utc_now
from retreat_booking.utils.intervals import COUNTED_STATUSES, Stay

logger = structlog.get_logger(__name__)

RESERVATION_STATUSES = ("PENDING", "CONFIRMED", "COMPLETED", "CANCELLED")
INITIAL_STATUSES = ("PENDING", "CONFIRMED")

ALLOWED_TRANSITIONS = frozenset(
    {
        ("PENDING", "CONFIRMED"),
        ("PENDING", "CANCELLED"),
        ("CONFIRMED", "COMPLETED"),
        ("CONFIRMED", "CANCELLED"),
    }
)

PATCHABLE_FIELDS = frozenset(
    {
        "check_in_date",
        "check_out_date",
        "number_of_guests",
        "status",
        "total_amount",
        "room_number",
        "special_requests",
        "notes",
    }
)

NULLABLE_FIELDS = frozenset({"room_number", "special_requests", "notes"})


def is_allowed_transition(current: str, requested: str) -> bool:
    return current == requested or (current, requested) in ALLOWED_TRANSITIONS


def _append_note(existing: Optional[str], label: str, addition: Optional[str]) -> Optional[str]:
    if not addition:
        return existing
    return f"{existing or ''}\n\n{label}: {addition}".strip()


def load_reservation(conn: Connection, reservation_id: int, lock: bool = False) -> ReservationView:
    row = get_reservation(conn, reservation_id, lock=lock)
    if row is None:
        raise NotFoundError("reservation", reservation_id)
    return ReservationView.from_row(row)


def load_retreat(conn: Connection, retreat_id: int, lock: bool = False) -> dict[str, Any]:
    retreat = get_retreat(conn, retreat_id, lock=lock)
    if retreat is None:
        raise NotFoundError("retreat", retreat_id)
    return retreat


def load_guest(conn: Connection, guest_id: int, lock: bool = False) -> dict[str, Any]:
    guest = get_guest(conn, guest_id, lock=lock)
    if guest is None:
        raise NotFoundError("guest", guest_id)
    return guest


def check_admission(
    conn: Connection,
    retreat: Mapping[str, Any],
    candidate: Stay,
    operation: str,
    exclude_reservation_id: Optional[int] = None,
) -> Optional[CapacityExceeded]:
    """
    Run the capacity guard against a fresh snapshot.

    The caller must hold the retreat's admission lock and the retreat row
    lock, and must write in the same transaction.

    Returns:
        Optional[CapacityExceeded]: None when the candidate is admitted
    """
    stays = get_committed_stays(conn, retreat["id"], candidate.start, candidate.end)
    decision = admit(retreat["capacity"], candidate, stays, exclude_reservation_id)

    if not decision.admitted:
        admissions_total.labels(operation=operation, outcome="capacity_exceeded").inc()
        logger.info(
            "admission_refused",
            operation=operation,
            retreat_id=retreat["id"],
            capacity=decision.capacity,
            committed=decision.committed,
            requested=decision.requested,
        )
        return CapacityExceeded(
            retreat_id=retreat["id"],
            capacity=decision.capacity,
            committed=decision.committed,
            requested=decision.requested,
        )

    admissions_total.labels(operation=operation, outcome="admitted").inc()
    return None


def create_reservation(
    engine: Engine,
    retreat_id: int,
    guest_id: int,
    check_in: date,
    check_out: date,
    party_size: int,
    status: str = "PENDING",
    total_amount: Optional[Decimal] = None,
    room_number: Optional[str] = None,
    special_requests: Optional[str] = None,
    notes: Optional[str] = None,
) -> Union[ReservationView, CapacityExceeded]:
    """
    Create a reservation if the retreat has room for the party.

    Args:
        engine: SQLAlchemy engine
        retreat_id: Retreat to book
        guest_id: Guest making the booking
        check_in: First day of the stay
        check_out: Last day of the stay (inclusive)
        party_size: Number of guests
        status: PENDING (default) or CONFIRMED
        total_amount: Price of the stay; defaults to retreat price x party size
        room_number: Optional room assignment
        special_requests: Free-text requests
        notes: Staff notes

    Returns:
        ReservationView on success, CapacityExceeded when the party does not fit

    Raises:
        BookingValidationError: Malformed input (before any storage access)
        NotFoundError: Unknown retreat or guest
    """
    validate_stay(check_in, check_out, party_size)
    if status not in INITIAL_STATUSES:
        raise BookingValidationError("status", f"new reservations must be one of {INITIAL_STATUSES}")
    if total_amount is not None and Decimal(total_amount) < 0:
        raise BookingValidationError("total_amount", "total amount cannot be negative")

    candidate = Stay(start=check_in, end=check_out, party_size=party_size, status=status)

    with retreat_admission_lock(retreat_id), admission_duration.labels(operation="create").time():
        with engine.begin() as conn:
            retreat = load_retreat(conn, retreat_id, lock=True)
            load_guest(conn, guest_id)

            refusal = check_admission(conn, retreat, candidate, "create")
            if refusal is not None:
                return refusal

            if total_amount is None:
                total_amount = Decimal(retreat["price"]) * party_size

            reservation_id = insert_reservation(
                conn,
                {
                    "retreat_id": retreat_id,
                    "guest_id": guest_id,
                    "check_in_date": check_in,
                    "check_out_date": check_out,
                    "number_of_guests": party_size,
                    "status": status,
                    "total_amount": Decimal(total_amount),
                    "paid_amount": Decimal("0"),
                    "payment_status": "PENDING",
                    "room_number": room_number,
                    "special_requests": special_requests,
                    "notes": notes,
                },
            )
            reservation = load_reservation(conn, reservation_id)

    logger.info(
        "reservation_created",
        reservation_id=reservation.id,
        retreat_id=retreat_id,
        guest_id=guest_id,
        party_size=party_size,
        status=reservation.status,
    )
    return reservation


def update_reservation(
    engine: Engine, reservation_id: int, patch: Mapping[str, Any]
) -> Union[ReservationView, CapacityExceeded, InvalidStateTransition]:
    """
    Apply a partial update to a reservation.

    Capacity is re-checked (excluding the reservation itself) when the dates
    or party size change, or when the status moves into a state that counts
    toward capacity.

    Args:
        engine: SQLAlchemy engine
        reservation_id: Reservation to update
        patch: Subset of PATCHABLE_FIELDS to change

    Returns:
        ReservationView, CapacityExceeded or InvalidStateTransition

    Raises:
        BookingValidationError: Unknown fields or malformed values
        NotFoundError: Unknown reservation
    """
    unknown = set(patch) - PATCHABLE_FIELDS
    if unknown:
        raise BookingValidationError(sorted(unknown)[0], "field cannot be updated")
    patch = {
        key: value for key, value in patch.items() if value is not None or key in NULLABLE_FIELDS
    }
    if "status" in patch and patch["status"] not in RESERVATION_STATUSES:
        raise BookingValidationError("status", f"status must be one of {RESERVATION_STATUSES}")
    if patch.get("total_amount") is not None and Decimal(patch["total_amount"]) < 0:
        raise BookingValidationError("total_amount", "total amount cannot be negative")

    with engine.connect() as conn:
        retreat_id = load_reservation(conn, reservation_id).retreat_id

    with retreat_admission_lock(retreat_id), admission_duration.labels(operation="update").time():
        with engine.begin() as conn:
            retreat = load_retreat(conn, retreat_id, lock=True)
            current = load_reservation(conn, reservation_id, lock=True)

            requested_status = patch.get("status", current.status)
            if not is_allowed_transition(current.status, requested_status):
                return InvalidStateTransition(
                    reservation_id=reservation_id,
                    current=current.status,
                    requested=requested_status,
                )

            check_in = patch.get("check_in_date", current.check_in_date)
            check_out = patch.get("check_out_date", current.check_out_date)
            party_size = patch.get("number_of_guests", current.number_of_guests)
            validate_stay(check_in, check_out, party_size)

            stay_changed = (
                check_in != current.check_in_date
                or check_out != current.check_out_date
                or party_size != current.number_of_guests
            )
            starts_counting = (
                requested_status in COUNTED_STATUSES and current.status not in COUNTED_STATUSES
            )

            if stay_changed or starts_counting:
                candidate = Stay(
                    start=check_in,
                    end=check_out,
                    party_size=party_size,
                    status=requested_status,
                    reservation_id=reservation_id,
                )
                refusal = check_admission(
                    conn, retreat, candidate, "update", exclude_reservation_id=reservation_id
                )
                if refusal is not None:
                    return refusal

            values = {key: value for key, value in patch.items() if key in PATCHABLE_FIELDS}
            if values:
                update_reservation_fields(conn, reservation_id, values)
            reservation = load_reservation(conn, reservation_id)

    logger.info(
        "reservation_updated",
        reservation_id=reservation_id,
        fields=sorted(patch),
        status=reservation.status,
        readmitted=stay_changed or starts_counting,
    )
    return reservation


def update_payment(
    engine: Engine,
    reservation_id: int,
    paid_amount: Decimal,
    method: Optional[str] = None,
    status: Optional[str] = None,
    reference: Optional[str] = None,
) -> PaymentUpdateResult:
    """
    Record the amount paid so far and mirror it into the ledger.

    The reservation's payment fields are written atomically under a row
    lock. The ledger entry is written afterwards in its own transaction; if
    that fails the payment still stands and the failure is reported in
    `warnings` (see repair_ledger_drift).

    A payment that would confirm a PENDING reservation goes through the
    capacity guard under the retreat lock. If the stay no longer fits, the
    payment is still recorded, the reservation stays PENDING and a
    CapacityExceeded warning is returned.

    Args:
        engine: SQLAlchemy engine
        reservation_id: Reservation being paid
        paid_amount: Absolute amount paid (not an increment)
        method: Payment method (card, cash, transfer, ...)
        status: Explicit payment status override
        reference: External payment reference stored on the ledger entry

    Returns:
        PaymentUpdateResult

    Raises:
        BookingValidationError: Negative amount or unknown status
        NotFoundError: Unknown reservation
    """
    paid_amount = Decimal(paid_amount)
    if paid_amount < 0:
        raise BookingValidationError("paid_amount", "paid amount cannot be negative")

    with engine.connect() as conn:
        retreat_id = load_reservation(conn, reservation_id).retreat_id

    refusal: Optional[CapacityExceeded] = None
    with retreat_admission_lock(retreat_id), engine.begin() as conn:
        retreat = load_retreat(conn, retreat_id, lock=True)
        current = load_reservation(conn, reservation_id, lock=True)
        entry = get_booking_income_entry(conn, reservation_id)
        result = reconcile(current, paid_amount, method, status, entry)

        # A payment that confirms a PENDING stay claims seats like any admission
        if (
            result.reservation_status in COUNTED_STATUSES
            and current.status not in COUNTED_STATUSES
        ):
            candidate = Stay(
                start=current.check_in_date,
                end=current.check_out_date,
                party_size=current.number_of_guests,
                status=result.reservation_status,
                reservation_id=reservation_id,
            )
            refusal = check_admission(
                conn, retreat, candidate, "payment", exclude_reservation_id=reservation_id
            )
            if refusal is not None:
                result = replace(result, reservation_status=current.status)

        update_reservation_fields(
            conn,
            reservation_id,
            {
                "paid_amount": result.paid_amount,
                "payment_status": result.payment_status,
                "payment_method": result.payment_method,
                "status": result.reservation_status,
            },
        )
        reservation = load_reservation(conn, reservation_id)

    payment_updates_total.labels(payment_status=result.payment_status).inc()

    entry_id = entry["id"] if entry else None
    warnings: list[str] = []
    if refusal is not None:
        warnings.append(
            f"CapacityExceeded: reservation left {reservation.status}, "
            f"{refusal.available} of {refusal.capacity} spots available"
        )
    if result.ledger_op is not None:
        entry_id, ledger_warnings = apply_ledger_op_best_effort(
            engine, reservation, result.ledger_op, reference=reference
        )
        warnings.extend(ledger_warnings)

    logger.info(
        "payment_updated",
        reservation_id=reservation_id,
        paid_amount=str(result.paid_amount),
        delta=str(result.delta),
        payment_status=result.payment_status,
        reservation_status=result.reservation_status,
        ledger_warnings=len(warnings),
    )
    return PaymentUpdateResult(
        reservation=reservation, delta=result.delta, ledger_entry_id=entry_id, warnings=warnings
    )


def get_payment_summary(engine: Engine, reservation_id: int) -> PaymentSummary:
    """
    Payment fields of a reservation together with its ledger history.

    Raises:
        NotFoundError: Unknown reservation
    """
    with engine.connect() as conn:
        reservation = load_reservation(conn, reservation_id)
        entries = get_ledger_entries(conn, reservation_id)
    return PaymentSummary(reservation=reservation, ledger_entries=entries)


def get_reservation_view(engine: Engine, reservation_id: int) -> ReservationView:
    with engine.connect() as conn:
        return load_reservation(conn, reservation_id)


def check_in(
    engine: Engine,
    reservation_id: int,
    staff_member: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Union[ReservationView, AlreadyCheckedIn, InvalidStateTransition]:
    """
    Check a guest in and award stay points, exactly once.

    The check-in timestamp is set with a conditional update that only
    matches while it is still empty, so a retried or concurrent check-in
    returns AlreadyCheckedIn and never awards points twice. Metadata, points
    and the communication record commit together or not at all.

    Args:
        engine: SQLAlchemy engine
        reservation_id: Reservation checking in
        staff_member: Staff performing the check-in
        metadata: Optional actual_check_in_time, room_number, additional_notes

    Returns:
        ReservationView, AlreadyCheckedIn or InvalidStateTransition

    Raises:
        NotFoundError: Unknown reservation
    """
    metadata = metadata or {}
    staff = staff_member or DEFAULT_STAFF_MEMBER
    checked_in_at: datetime = metadata.get("actual_check_in_time") or utc_now()

    with engine.begin() as conn:
        current = load_reservation(conn, reservation_id)

        if current.actual_check_in_time is not None:
            check_ins_total.labels(outcome="already_checked_in").inc()
            return AlreadyCheckedIn(reservation_id, current.actual_check_in_time)

        if current.status in ("CANCELLED", "COMPLETED"):
            check_ins_total.labels(outcome="invalid_state").inc()
            return InvalidStateTransition(reservation_id, current.status, "CHECKED_IN")

        room_number = metadata.get("room_number") or current.room_number
        performed = mark_checked_in(
            conn,
            reservation_id,
            checked_in_at=checked_in_at,
            staff_member=staff,
            room_number=room_number,
            notes=_append_note(current.notes, "Check-in Notes", metadata.get("additional_notes")),
        )
        if not performed:
            check_ins_total.labels(outcome="already_checked_in").inc()
            winner = load_reservation(conn, reservation_id)
            return AlreadyCheckedIn(reservation_id, winner.actual_check_in_time)

        retreat = load_retreat(conn, current.retreat_id)
        account = LoyaltyAccount.from_row(load_guest(conn, current.guest_id, lock=True))

        award = accrue(account, current.total_amount, retreat["title"])
        if award is not None:
            record_points(conn, award, reservation_id)
            loyalty_points_awarded_total.labels(reason="stay").inc(award.points)

        insert_communication(
            conn,
            guest_id=current.guest_id,
            reservation_id=reservation_id,
            type="BOOKING_RELATED",
            subject="Guest Check-in Completed",
            message=(
                f"Guest checked in successfully for {retreat['title']}. "
                f"Room: {room_number or 'TBD'}"
            ),
            channel="in-person",
            staff_member=staff,
        )
        reservation = load_reservation(conn, reservation_id)

    check_ins_total.labels(outcome="checked_in").inc()
    logger.info(
        "guest_checked_in",
        reservation_id=reservation_id,
        guest_id=current.guest_id,
        staff_member=staff,
        points_awarded=award.points if award else 0,
    )
    return reservation


def check_out(
    engine: Engine,
    reservation_id: int,
    staff_member: Optional[str] = None,
    additional_charges: Decimal = Decimal("0"),
    damage_charges: Decimal = Decimal("0"),
    payment_processed: bool = False,
    additional_notes: Optional[str] = None,
    actual_check_out_time: Optional[datetime] = None,
    rating: Optional[int] = None,
) -> Union[CheckOutResult, NotCheckedIn, AlreadyCheckedOut, InvalidStateTransition]:
    """
    Check a guest out and complete the stay.

    Extra and damage charges are added to the total. When the final payment
    is processed at the desk, paid_amount is set to the final total through
    the reconciliation engine so the ledger keeps mirroring it. A review
    rated highly earns bonus points, and a guest whose balance crosses a tier
    threshold is upgraded and notified.

    Returns:
        CheckOutResult, NotCheckedIn, AlreadyCheckedOut or InvalidStateTransition

    Raises:
        BookingValidationError: Negative charges or a rating outside 1-5
        NotFoundError: Unknown reservation
    """
    additional_charges = Decimal(additional_charges)
    damage_charges = Decimal(damage_charges)
    if additional_charges < 0 or damage_charges < 0:
        raise BookingValidationError("additional_charges", "charges cannot be negative")
    if rating is not None and not 1 <= rating <= 5:
        raise BookingValidationError("rating", "rating must be between 1 and 5")

    staff = staff_member or DEFAULT_STAFF_MEMBER
    reconciliation = None
    review_points = 0
    new_tier: Optional[str] = None

    with engine.begin() as conn:
        current = load_reservation(conn, reservation_id, lock=True)

        if current.actual_check_out_time is not None:
            check_outs_total.labels(outcome="already_checked_out").inc()
            return AlreadyCheckedOut(reservation_id, current.actual_check_out_time)
        if current.actual_check_in_time is None:
            check_outs_total.labels(outcome="not_checked_in").inc()
            return NotCheckedIn(reservation_id)
        if not is_allowed_transition(current.status, "COMPLETED"):
            check_outs_total.labels(outcome="invalid_state").inc()
            return InvalidStateTransition(reservation_id, current.status, "COMPLETED")

        final_amount = current.total_amount + additional_charges + damage_charges
        values: dict[str, Any] = {
            "actual_check_out_time": actual_check_out_time or utc_now(),
            "check_out_staff": staff,
            "total_amount": final_amount,
            "status": "COMPLETED",
            "notes": _append_note(current.notes, "Check-out Notes", additional_notes),
        }

        if payment_processed:
            completed = replace(current, total_amount=final_amount, status="COMPLETED")
            entry = get_booking_income_entry(conn, reservation_id)
            reconciliation = reconcile(completed, final_amount, existing_entry=entry)
            values.update(
                paid_amount=reconciliation.paid_amount,
                payment_status=reconciliation.payment_status,
            )

        if not mark_checked_out(conn, reservation_id, values):
            check_outs_total.labels(outcome="already_checked_out").inc()
            return AlreadyCheckedOut(reservation_id)

        retreat = load_retreat(conn, current.retreat_id)
        insert_communication(
            conn,
            guest_id=current.guest_id,
            reservation_id=reservation_id,
            type="BOOKING_RELATED",
            subject="Guest Check-out Completed",
            message=(
                f"Guest checked out successfully from {retreat['title']}. "
                f"Final amount: {final_amount}"
            ),
            channel="in-person",
            staff_member=staff,
        )

        account = LoyaltyAccount.from_row(load_guest(conn, current.guest_id, lock=True))
        balance = account.points

        bonus = review_bonus(account, rating)
        if bonus is not None:
            balance = record_points(conn, bonus, reservation_id)
            review_points = bonus.points
            loyalty_points_awarded_total.labels(reason="review").inc(bonus.points)

        if account.program_active:
            tier = next_tier(account.tier, balance)
            if tier != account.tier:
                set_loyalty_tier(conn, current.guest_id, tier)
                insert_communication(
                    conn,
                    guest_id=current.guest_id,
                    type="MARKETING",
                    subject=f"Congratulations! You've been upgraded to {tier} tier",
                    message=(
                        f"Thank you for your loyalty! You've been upgraded to {tier} tier "
                        f"with {balance} points."
                    ),
                    channel="email",
                    staff_member=DEFAULT_STAFF_MEMBER,
                )
                new_tier = tier

        reservation = load_reservation(conn, reservation_id)

    warnings: list[str] = []
    if reconciliation is not None and reconciliation.ledger_op is not None:
        _, warnings = apply_ledger_op_best_effort(engine, reservation, reconciliation.ledger_op)

    check_outs_total.labels(outcome="checked_out").inc()
    logger.info(
        "guest_checked_out",
        reservation_id=reservation_id,
        final_amount=str(final_amount),
        payment_processed=payment_processed,
        review_points=review_points,
        new_tier=new_tier,
    )
    return CheckOutResult(
        reservation=reservation,
        final_amount=final_amount,
        review_points=review_points,
        new_tier=new_tier,
        warnings=warnings,
    )


def cancel_reservation(
    engine: Engine, reservation_id: int, hard_delete: bool = False
) -> Union[ReservationView, HasDependentLedgerEntries, InvalidStateTransition]:
    """
    Cancel a reservation, or delete it outright when it has no history.

    A soft cancel is idempotent. A hard delete is refused while the
    reservation has ledger entries, a paid amount or loyalty transactions;
    those must be cancelled instead so the financial history survives.

    Returns:
        The reservation as it was before a hard delete, the cancelled
        reservation, HasDependentLedgerEntries or InvalidStateTransition

    Raises:
        NotFoundError: Unknown reservation
    """
    with engine.begin() as conn:
        current = load_reservation(conn, reservation_id, lock=True)

        if hard_delete:
            ledger_entries = count_ledger_entries(conn, reservation_id)
            loyalty_transactions = count_loyalty_transactions(conn, reservation_id)
            if ledger_entries or loyalty_transactions or current.paid_amount > 0:
                logger.info(
                    "hard_delete_refused",
                    reservation_id=reservation_id,
                    ledger_entries=ledger_entries,
                    loyalty_transactions=loyalty_transactions,
                    paid_amount=str(current.paid_amount),
                )
                return HasDependentLedgerEntries(
                    reservation_id=reservation_id,
                    ledger_entries=ledger_entries,
                    loyalty_transactions=loyalty_transactions,
                    paid_amount=current.paid_amount,
                )
            clear_promoted_reservation(conn, reservation_id)
            delete_reservation(conn, reservation_id)
            logger.info("reservation_deleted", reservation_id=reservation_id)
            return current

        if current.status == "CANCELLED":
            return current
        if not is_allowed_transition(current.status, "CANCELLED"):
            return InvalidStateTransition(reservation_id, current.status, "CANCELLED")

        update_reservation_fields(conn, reservation_id, {"status": "CANCELLED"})
        reservation = load_reservation(conn, reservation_id)

    logger.info("reservation_cancelled", reservation_id=reservation_id, previous=current.status)
    return reservation
