"""
Unit tests for calendar window resolution.
"""

from __future__ import annotations

from datetime import date

import pytest

from retreat_booking.errors import BookingValidationError
from retreat_booking.utils.windows import resolve_window

TODAY = date(2026, 10, 19)  # a Monday


@pytest.mark.unit
def test_day_view_defaults_to_today() -> None:
    assert resolve_window("day", TODAY) == (TODAY, TODAY)


@pytest.mark.unit
def test_day_view_uses_requested_day() -> None:
    day = date(2026, 12, 24)
    assert resolve_window("day", TODAY, day=day) == (day, day)


@pytest.mark.unit
def test_week_view_snaps_to_monday() -> None:
    start, end = resolve_window("week", TODAY, week_start=date(2026, 10, 23))  # Friday

    assert start == date(2026, 10, 19)
    assert end == date(2026, 10, 25)


@pytest.mark.unit
def test_month_view_covers_whole_month() -> None:
    assert resolve_window("month", TODAY, year=2028, month=2) == (date(2028, 2, 1), date(2028, 2, 29))


@pytest.mark.unit
def test_month_view_defaults_to_current_month() -> None:
    assert resolve_window("month", TODAY) == (date(2026, 10, 1), date(2026, 10, 31))


@pytest.mark.unit
def test_list_view_spans_ninety_days() -> None:
    start, end = resolve_window("list", TODAY)

    assert start == TODAY
    assert (end - start).days == 89


@pytest.mark.unit
def test_unknown_view_rejected() -> None:
    with pytest.raises(BookingValidationError) as exc_info:
        resolve_window("year", TODAY)

    assert exc_info.value.field == "view"


@pytest.mark.unit
def test_month_out_of_range_rejected() -> None:
    with pytest.raises(BookingValidationError):
        resolve_window("month", TODAY, year=2026, month=13)


@pytest.mark.unit
def test_month_zero_is_rejected_not_defaulted() -> None:
    with pytest.raises(BookingValidationError) as exc_info:
        resolve_window("month", TODAY, year=2026, month=0)

    assert exc_info.value.field == "month"
