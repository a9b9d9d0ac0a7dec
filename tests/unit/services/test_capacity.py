"""
Unit tests for the capacity guard.
"""

from __future__ import annotations

from datetime import date

import pytest

from retreat_booking.errors import BookingValidationError
from retreat_booking.services.capacity import admit, validate_stay
from retreat_booking.utils.intervals import Stay

# Days 1-5 of the retreat, 15 guests
EXISTING = [Stay(date(2026, 3, 1), date(2026, 3, 5), 15, "CONFIRMED", reservation_id=1)]


@pytest.mark.unit
def test_party_that_overshoots_capacity_is_rejected() -> None:
    """15 booked + 6 requested over overlapping days exceeds 20."""
    decision = admit(20, Stay(date(2026, 3, 3), date(2026, 3, 7), 6, "PENDING"), EXISTING)

    assert not decision.admitted
    assert decision.reason == "CapacityExceeded"
    assert decision.committed == 15
    assert decision.requested == 6
    assert decision.available == 5


@pytest.mark.unit
def test_party_that_exactly_fills_capacity_is_admitted() -> None:
    decision = admit(20, Stay(date(2026, 3, 3), date(2026, 3, 7), 5, "PENDING"), EXISTING)

    assert decision.admitted
    assert decision.reason is None


@pytest.mark.unit
def test_non_overlapping_party_ignores_existing_guests() -> None:
    decision = admit(20, Stay(date(2026, 3, 6), date(2026, 3, 9), 20, "PENDING"), EXISTING)

    assert decision.admitted
    assert decision.committed == 0


@pytest.mark.unit
def test_excluded_reservation_does_not_count_against_itself() -> None:
    """Growing reservation 1 from 15 to 20 guests fits once it stops counting itself."""
    candidate = Stay(date(2026, 3, 1), date(2026, 3, 5), 20, "CONFIRMED", reservation_id=1)

    assert not admit(20, candidate, EXISTING).admitted
    assert admit(20, candidate, EXISTING, exclude_reservation_id=1).admitted


@pytest.mark.unit
def test_pending_reservations_leave_capacity_free() -> None:
    existing = [Stay(date(2026, 3, 1), date(2026, 3, 5), 20, "PENDING")]

    assert admit(20, Stay(date(2026, 3, 1), date(2026, 3, 5), 20, "PENDING"), existing).admitted


@pytest.mark.unit
@pytest.mark.parametrize("party_size", [0, -3])
def test_non_positive_party_size_is_a_validation_error(party_size: int) -> None:
    with pytest.raises(BookingValidationError) as exc_info:
        admit(20, Stay(date(2026, 3, 1), date(2026, 3, 2), party_size, "PENDING"), [])

    assert exc_info.value.field == "number_of_guests"


@pytest.mark.unit
def test_inverted_range_is_a_validation_error() -> None:
    with pytest.raises(BookingValidationError):
        validate_stay(date(2026, 3, 5), date(2026, 3, 1), 2)


@pytest.mark.unit
def test_zero_length_stay_is_valid() -> None:
    validate_stay(date(2026, 3, 5), date(2026, 3, 5), 2)
