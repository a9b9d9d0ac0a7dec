"""
Retreat waitlists.

Guests who cannot be admitted join a per-retreat queue served first come,
first served. Promotion runs the same capacity admission as a new booking,
under the same retreat lock, and creates a CONFIRMED reservation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

import structlog
from sqlalchemy.engine import Engine

from retreat_booking.db.readers.reservations import get_committed_stays
from retreat_booking.db.readers.waitlist import get_waiting_entries, get_waitlist_entry
from retreat_booking.db.writers.reservations import insert_reservation
from retreat_booking.db.writers.waitlist import insert_waitlist_entry, mark_promoted, mark_removed
from retreat_booking.errors import BookingValidationError, NotFoundError
from retreat_booking.metrics import admission_duration, waitlist_promotions_total
from retreat_booking.services.admission_locks import retreat_admission_lock
from retreat_booking.services.bookings import (
    check_admission,
    load_guest,
    load_reservation,
    load_retreat,
)
from retreat_booking.services.capacity import admit, validate_stay
from retreat_booking.services.outcomes import CapacityExceeded, ReservationView
from retreat_booking.utils.intervals import Stay, aggregate_quantity

logger = structlog.get_logger(__name__)

PRIORITIES = ("NORMAL", "HIGH", "VIP")


@dataclass(frozen=True)
class WaitlistItem:
    entry: dict[str, Any]
    position: int
    can_be_promoted: bool = False


@dataclass(frozen=True)
class WaitlistView:
    retreat_id: int
    capacity: int
    available_spots: int
    entries: list[WaitlistItem] = field(default_factory=list)


@dataclass(frozen=True)
class PromotionResult:
    entry_id: int
    outcome: Union[ReservationView, CapacityExceeded]

    @property
    def promoted(self) -> bool:
        return isinstance(self.outcome, ReservationView)


def _entry_stay(entry: dict[str, Any]) -> Stay:
    return Stay(
        start=entry["check_in_date"],
        end=entry["check_out_date"],
        party_size=entry["number_of_guests"],
        status="CONFIRMED",
    )


def add_to_waitlist(
    engine: Engine,
    retreat_id: int,
    guest_id: int,
    check_in: date,
    check_out: date,
    party_size: int,
    priority: str = "NORMAL",
    special_requests: Optional[str] = None,
) -> WaitlistItem:
    """
    Queue a guest for a retreat.

    Returns:
        WaitlistItem: The new entry and its 1-based position in the queue

    Raises:
        BookingValidationError: Malformed stay or unknown priority
        NotFoundError: Unknown retreat or guest
    """
    validate_stay(check_in, check_out, party_size)
    if priority not in PRIORITIES:
        raise BookingValidationError("priority", f"priority must be one of {PRIORITIES}")

    with engine.begin() as conn:
        load_retreat(conn, retreat_id)
        load_guest(conn, guest_id)
        entry_id = insert_waitlist_entry(
            conn,
            {
                "retreat_id": retreat_id,
                "guest_id": guest_id,
                "check_in_date": check_in,
                "check_out_date": check_out,
                "number_of_guests": party_size,
                "priority": priority,
                "special_requests": special_requests,
                "status": "WAITING",
            },
        )
        waiting = get_waiting_entries(conn, retreat_id)

    position = next(i for i, entry in enumerate(waiting, start=1) if entry["id"] == entry_id)
    logger.info(
        "waitlist_entry_added",
        entry_id=entry_id,
        retreat_id=retreat_id,
        guest_id=guest_id,
        position=position,
    )
    return WaitlistItem(entry=waiting[position - 1], position=position)


def list_waitlist(engine: Engine, retreat_id: int) -> WaitlistView:
    """
    Current queue for a retreat with available spots and promotability.

    `available_spots` is the capacity left over the retreat's whole offering
    window; `can_be_promoted` checks each entry's own dates independently.

    Raises:
        NotFoundError: Unknown retreat
    """
    with engine.connect() as conn:
        retreat = load_retreat(conn, retreat_id)
        waiting = get_waiting_entries(conn, retreat_id)
        window_start = min([retreat["start_date"], *(e["check_in_date"] for e in waiting)])
        window_end = max([retreat["end_date"], *(e["check_out_date"] for e in waiting)])
        stays = get_committed_stays(conn, retreat_id, window_start, window_end)

    committed = aggregate_quantity(retreat["start_date"], retreat["end_date"], stays)
    items = [
        WaitlistItem(
            entry=entry,
            position=position,
            can_be_promoted=admit(retreat["capacity"], _entry_stay(entry), stays).admitted,
        )
        for position, entry in enumerate(waiting, start=1)
    ]
    return WaitlistView(
        retreat_id=retreat_id,
        capacity=retreat["capacity"],
        available_spots=max(retreat["capacity"] - committed, 0),
        entries=items,
    )


def promote_entry(engine: Engine, entry_id: int) -> Union[ReservationView, CapacityExceeded]:
    """
    Turn a waitlist entry into a CONFIRMED reservation if it fits.

    Returns:
        ReservationView or CapacityExceeded

    Raises:
        NotFoundError: Unknown entry
        BookingValidationError: Entry is no longer waiting
    """
    with engine.connect() as conn:
        entry = get_waitlist_entry(conn, entry_id)
    if entry is None:
        raise NotFoundError("waitlist entry", entry_id)

    retreat_id = entry["retreat_id"]
    with retreat_admission_lock(retreat_id), admission_duration.labels(operation="promote").time():
        with engine.begin() as conn:
            retreat = load_retreat(conn, retreat_id, lock=True)
            entry = get_waitlist_entry(conn, entry_id, lock=True)
            if entry is None:
                raise NotFoundError("waitlist entry", entry_id)
            if entry["status"] != "WAITING":
                raise BookingValidationError("entry_id", f"entry {entry_id} is {entry['status']}")

            refusal = check_admission(conn, retreat, _entry_stay(entry), "promote")
            if refusal is not None:
                waitlist_promotions_total.labels(outcome="capacity_exceeded").inc()
                return refusal

            reservation_id = insert_reservation(
                conn,
                {
                    "retreat_id": retreat_id,
                    "guest_id": entry["guest_id"],
                    "check_in_date": entry["check_in_date"],
                    "check_out_date": entry["check_out_date"],
                    "number_of_guests": entry["number_of_guests"],
                    "status": "CONFIRMED",
                    "total_amount": Decimal(retreat["price"]) * entry["number_of_guests"],
                    "paid_amount": Decimal("0"),
                    "payment_status": "PENDING",
                    "special_requests": entry["special_requests"],
                    "notes": f"Promoted from waitlist (priority {entry['priority']})",
                },
            )
            mark_promoted(conn, entry_id, reservation_id)
            reservation = load_reservation(conn, reservation_id)

    waitlist_promotions_total.labels(outcome="promoted").inc()
    return reservation


def promote(engine: Engine, retreat_id: int, entry_ids: list[int]) -> list[PromotionResult]:
    """
    Promote the given entries in the order supplied.

    Raises:
        BookingValidationError: An entry belongs to another retreat or is not waiting
        NotFoundError: An entry does not exist
    """
    with engine.connect() as conn:
        for entry_id in entry_ids:
            entry = get_waitlist_entry(conn, entry_id)
            if entry is None:
                raise NotFoundError("waitlist entry", entry_id)
            if entry["retreat_id"] != retreat_id:
                raise BookingValidationError(
                    "entry_ids", f"entry {entry_id} is not on the waitlist for retreat {retreat_id}"
                )

    return [PromotionResult(entry_id, promote_entry(engine, entry_id)) for entry_id in entry_ids]


def auto_promote(engine: Engine, retreat_id: int) -> list[PromotionResult]:
    """
    Promote waiting entries in queue order until one no longer fits.

    Stops at the first refusal so a later, smaller party never jumps ahead
    of an earlier one.

    Returns:
        list[PromotionResult]: Promoted entries, plus the refused one if any
    """
    with engine.connect() as conn:
        load_retreat(conn, retreat_id)
        waiting = get_waiting_entries(conn, retreat_id)

    results: list[PromotionResult] = []
    for entry in waiting:
        outcome = promote_entry(engine, entry["id"])
        results.append(PromotionResult(entry["id"], outcome))
        if isinstance(outcome, CapacityExceeded):
            break

    logger.info(
        "waitlist_auto_promoted",
        retreat_id=retreat_id,
        promoted=sum(1 for result in results if result.promoted),
        waiting=len(waiting),
    )
    return results


def remove_from_waitlist(engine: Engine, entry_id: int) -> dict[str, Any]:
    """
    Take an entry off the queue.

    Removing an entry that is already removed is a no-op.

    Raises:
        NotFoundError: Unknown entry
        BookingValidationError: Entry was already promoted
    """
    with engine.begin() as conn:
        entry = get_waitlist_entry(conn, entry_id, lock=True)
        if entry is None:
            raise NotFoundError("waitlist entry", entry_id)
        if entry["status"] == "PROMOTED":
            raise BookingValidationError("entry_id", f"entry {entry_id} was already promoted")
        if entry["status"] == "WAITING":
            mark_removed(conn, entry_id)
        entry = get_waitlist_entry(conn, entry_id)

    logger.info("waitlist_entry_removed", entry_id=entry_id)
    return entry or {}
