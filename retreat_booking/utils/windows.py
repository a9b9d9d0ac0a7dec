"""
Viewing-window resolution for calendar queries.

A window is an inclusive (start, end) date pair. The calendar supports four
views, matching the navigation a front desk uses: a single day, a Monday-based
week, a calendar month, and an open "list" view covering the next 90 days.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Optional

from retreat_booking.errors import BookingValidationError

VIEWS = ("day", "week", "month", "list")
LIST_VIEW_DAYS = 90


def resolve_window(
    view: str,
    today: date,
    year: Optional[int] = None,
    month: Optional[int] = None,
    week_start: Optional[date] = None,
    day: Optional[date] = None,
) -> tuple[date, date]:
    """
    Compute the inclusive date window for a calendar view.

    Args:
        view: One of "day", "week", "month", "list"
        today: Reference date used when the view's own anchor is omitted
        year: Year for the month view
        month: Month (1-12) for the month view
        week_start: Any day inside the requested week (snapped back to Monday)
        day: Day for the day view

    Returns:
        tuple[date, date]: (window_start, window_end), both inclusive

    Raises:
        BookingValidationError: If the view is unknown or the month is out of range
    """
    if view == "day":
        anchor = day or today
        return anchor, anchor

    if view == "week":
        anchor = week_start or today
        monday = anchor - timedelta(days=anchor.weekday())
        return monday, monday + timedelta(days=6)

    if view == "month":
        target_year = year if year is not None else today.year
        target_month = month if month is not None else today.month
        if not 1 <= target_month <= 12:
            raise BookingValidationError("month", f"month must be 1-12, got {target_month}")
        last_day = calendar.monthrange(target_year, target_month)[1]
        return date(target_year, target_month, 1), date(target_year, target_month, last_day)

    if view == "list":
        return today, today + timedelta(days=LIST_VIEW_DAYS - 1)

    raise BookingValidationError("view", f"view must be one of {', '.join(VIEWS)}, got {view!r}")
