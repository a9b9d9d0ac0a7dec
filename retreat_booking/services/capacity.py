"""
Capacity guard: decides whether a candidate stay fits a retreat.

Pure functions only. The orchestrator loads the snapshot of existing stays
under the retreat lock and asks `admit` for a decision before writing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from retreat_booking.errors import BookingValidationError
from retreat_booking.utils.intervals import Stay, aggregate_quantity


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    capacity: int
    committed: int
    requested: int
    reason: Optional[str] = None

    @property
    def available(self) -> int:
        return max(self.capacity - self.committed, 0)


def validate_stay(check_in: date, check_out: date, party_size: int) -> None:
    """
    Reject malformed stays before any storage access.

    Raises:
        BookingValidationError: If party size is not positive or the range is inverted
    """
    if party_size <= 0:
        raise BookingValidationError("number_of_guests", "party size must be positive")
    if check_out < check_in:
        raise BookingValidationError("check_out_date", "check-out date precedes check-in date")


def admit(
    capacity: int,
    candidate: Stay,
    existing: Iterable[Stay],
    exclude_reservation_id: Optional[int] = None,
) -> AdmissionDecision:
    """
    Decide whether `candidate` fits within `capacity` given the existing stays.

    Args:
        capacity: Maximum concurrent guests for the retreat
        candidate: The stay being created or changed
        existing: Every stay currently recorded for the retreat
        exclude_reservation_id: Reservation being updated, left out of the sum

    Returns:
        AdmissionDecision: admitted=False with reason "CapacityExceeded" on refusal

    Raises:
        BookingValidationError: If the candidate itself is malformed
    """
    validate_stay(candidate.start, candidate.end, candidate.party_size)

    others = [
        stay
        for stay in existing
        if exclude_reservation_id is None or stay.reservation_id != exclude_reservation_id
    ]
    committed = aggregate_quantity(candidate.start, candidate.end, others)

    if committed + candidate.party_size > capacity:
        return AdmissionDecision(
            admitted=False,
            capacity=capacity,
            committed=committed,
            requested=candidate.party_size,
            reason="CapacityExceeded",
        )

    return AdmissionDecision(
        admitted=True,
        capacity=capacity,
        committed=committed,
        requested=candidate.party_size,
    )
