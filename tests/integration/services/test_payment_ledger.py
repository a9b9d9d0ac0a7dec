"""
Integration tests for payment updates and the mirrored booking-income ledger.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable
from unittest.mock import patch

import pytest
from sqlalchemy import update
from sqlalchemy.engine import Engine

from retreat_booking.db.readers.ledger import get_booking_income_entry, get_ledger_drift
from retreat_booking.db.readers.reservations import get_committed_stays
from retreat_booking.errors import BookingValidationError, LedgerWriteFailure
from retreat_booking.models.ledger import LedgerEntry
from retreat_booking.services.bookings import (
    cancel_reservation,
    create_reservation,
    get_payment_summary,
    get_reservation_view,
    update_payment,
)
from retreat_booking.services.outcomes import ReservationView
from retreat_booking.services.payments import repair_ledger_drift
from retreat_booking.utils.intervals import aggregate_quantity


@pytest.fixture
def reservation(
    engine: Engine, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> ReservationView:
    """A PENDING reservation totalling 1000."""
    created = create_reservation(
        engine,
        make_retreat(),
        make_guest(),
        date(2026, 3, 1),
        date(2026, 3, 5),
        2,
        total_amount=Decimal("1000"),
    )
    assert isinstance(created, ReservationView)
    return created


def income_entry(engine: Engine, reservation_id: int) -> dict:
    with engine.connect() as conn:
        entry = get_booking_income_entry(conn, reservation_id)
    assert entry is not None
    return entry


@pytest.mark.integration
def test_partial_then_full_payment_keeps_one_mirrored_entry(
    engine: Engine, reservation: ReservationView
) -> None:
    """Test 0 -> 400 creates a PENDING entry and 400 -> 1000 updates it to PROCESSED."""
    partial = update_payment(engine, reservation.id, Decimal("400"), method="CARD")

    assert partial.reservation.payment_status == "PARTIAL"
    assert partial.reservation.status == "PENDING"
    assert partial.delta == Decimal("400")
    assert partial.warnings == []
    entry = income_entry(engine, reservation.id)
    assert Decimal(entry["amount"]) == Decimal("400")
    assert entry["status"] == "PENDING"
    assert entry["reference"] == "CARD"
    assert partial.ledger_entry_id == entry["id"]

    full = update_payment(engine, reservation.id, Decimal("1000"))

    assert full.reservation.payment_status == "PAID"
    assert full.reservation.status == "CONFIRMED"
    assert full.reservation.payment_method == "CARD"
    assert full.delta == Decimal("600")
    assert full.ledger_entry_id == entry["id"]
    entry = income_entry(engine, reservation.id)
    assert Decimal(entry["amount"]) == Decimal("1000")
    assert entry["status"] == "PROCESSED"

    summary = get_payment_summary(engine, reservation.id)
    assert len(summary.ledger_entries) == 1
    assert summary.remaining_balance == Decimal("0")


@pytest.mark.integration
def test_repeating_the_same_amount_writes_nothing(
    engine: Engine, reservation: ReservationView
) -> None:
    update_payment(engine, reservation.id, Decimal("400"))

    with patch("retreat_booking.db.writers.ledger.apply_ledger_op") as mock_apply:
        result = update_payment(engine, reservation.id, Decimal("400"))

    mock_apply.assert_not_called()
    assert result.delta == Decimal("0")
    assert result.ledger_entry_id == income_entry(engine, reservation.id)["id"]


@pytest.mark.integration
def test_zero_payment_on_fresh_reservation_creates_no_entry(
    engine: Engine, reservation: ReservationView
) -> None:
    result = update_payment(engine, reservation.id, Decimal("0"))

    assert result.ledger_entry_id is None
    assert get_payment_summary(engine, reservation.id).ledger_entries == []


@pytest.mark.integration
def test_ledger_failure_keeps_payment_and_reports_warning(
    engine: Engine, reservation: ReservationView
) -> None:
    """Test that a failed ledger write leaves paid_amount committed with a warning."""
    failure = LedgerWriteFailure(reservation.id, Exception("disk full"))
    with patch("retreat_booking.db.writers.ledger.apply_ledger_op", side_effect=failure):
        result = update_payment(engine, reservation.id, Decimal("400"))

    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("LedgerWriteFailure")
    assert result.ledger_entry_id is None
    assert get_reservation_view(engine, reservation.id).paid_amount == Decimal("400")

    with engine.connect() as conn:
        drift = get_ledger_drift(conn)
    assert [row["id"] for row in drift] == [reservation.id]


@pytest.mark.integration
def test_repair_ledger_drift_restores_mirror(engine: Engine, reservation: ReservationView) -> None:
    """Test that missing and stale entries are both brought back in line."""
    failure = LedgerWriteFailure(reservation.id, Exception("timeout"))
    with patch("retreat_booking.db.writers.ledger.apply_ledger_op", side_effect=failure):
        update_payment(engine, reservation.id, Decimal("400"))

    assert repair_ledger_drift(engine) == [reservation.id]
    assert Decimal(income_entry(engine, reservation.id)["amount"]) == Decimal("400")

    with engine.begin() as conn:
        conn.execute(
            update(LedgerEntry)
            .where(LedgerEntry.reservation_id == reservation.id)
            .values(amount=Decimal("123"))
        )

    assert repair_ledger_drift(engine) == [reservation.id]
    assert Decimal(income_entry(engine, reservation.id)["amount"]) == Decimal("400")
    assert repair_ledger_drift(engine) == []


@pytest.mark.integration
def test_payment_on_cancelled_reservation_keeps_it_cancelled(
    engine: Engine, reservation: ReservationView
) -> None:
    cancel_reservation(engine, reservation.id)

    result = update_payment(engine, reservation.id, Decimal("1000"))

    assert result.reservation.payment_status == "PAID"
    assert result.reservation.status == "CANCELLED"


@pytest.mark.integration
def test_refund_updates_entry_down(engine: Engine, reservation: ReservationView) -> None:
    update_payment(engine, reservation.id, Decimal("400"))

    result = update_payment(engine, reservation.id, Decimal("150"))

    assert result.delta == Decimal("-250")
    assert result.reservation.payment_status == "PARTIAL"
    assert Decimal(income_entry(engine, reservation.id)["amount"]) == Decimal("150")


@pytest.mark.integration
def test_negative_payment_is_rejected(engine: Engine, reservation: ReservationView) -> None:
    with pytest.raises(BookingValidationError):
        update_payment(engine, reservation.id, Decimal("-1"))

    assert get_reservation_view(engine, reservation.id).paid_amount == Decimal("0")


@pytest.mark.integration
def test_full_payment_does_not_confirm_past_capacity(
    engine: Engine, make_retreat: Callable[..., int], make_guest: Callable[..., int]
) -> None:
    """Test that paying a PENDING stay in full re-runs the capacity guard."""
    retreat_id = make_retreat(capacity=20)
    pending = create_reservation(
        engine,
        retreat_id,
        make_guest(),
        date(2026, 3, 2),
        date(2026, 3, 4),
        10,
        total_amount=Decimal("1000"),
    )
    # PENDING does not hold seats, so a CONFIRMED party of 15 still fits
    confirmed = create_reservation(
        engine, retreat_id, make_guest(), date(2026, 3, 2), date(2026, 3, 4), 15, status="CONFIRMED"
    )
    assert isinstance(pending, ReservationView)
    assert isinstance(confirmed, ReservationView)

    result = update_payment(engine, pending.id, Decimal("1000"))

    assert result.reservation.status == "PENDING"
    assert result.reservation.payment_status == "PAID"
    assert result.reservation.paid_amount == Decimal("1000")
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("CapacityExceeded")
    assert Decimal(income_entry(engine, pending.id)["amount"]) == Decimal("1000")

    with engine.connect() as conn:
        stays = get_committed_stays(conn, retreat_id, date(2026, 3, 1), date(2026, 3, 10))
    assert aggregate_quantity(date(2026, 3, 2), date(2026, 3, 4), stays) == 15


@pytest.mark.integration
def test_full_payment_confirms_when_there_is_room(
    engine: Engine, reservation: ReservationView
) -> None:
    result = update_payment(engine, reservation.id, Decimal("1000"))

    assert result.reservation.status == "CONFIRMED"
    assert result.warnings == []
