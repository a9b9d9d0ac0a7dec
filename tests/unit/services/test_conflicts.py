"""
Unit tests for resource conflict detection.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from retreat_booking.services.conflicts import (
    ACTIVITY,
    INSTRUCTOR,
    LOCATION,
    RETREAT,
    ScheduledItem,
    detect_conflicts,
    normalize_resource,
    resource_availability,
)


def retreat(
    item_id: int, start: date, end: date, instructor: str | None, location: str | None
) -> ScheduledItem:
    return ScheduledItem(
        kind=RETREAT,
        id=item_id,
        name=f"Retreat {item_id}",
        start=start,
        end=end,
        instructor=instructor,
        location=location,
        retreat_id=item_id,
    )


@pytest.mark.unit
def test_shared_instructor_over_overlapping_days_is_reported() -> None:
    """Scenario: same instructor on days 1-5 and 3-7 yields one instructor conflict."""
    items = [
        retreat(1, date(2026, 3, 1), date(2026, 3, 5), "Amina Haddad", "Dune Hall"),
        retreat(2, date(2026, 3, 3), date(2026, 3, 7), "Amina Haddad", "Oasis Tent"),
    ]

    reports = detect_conflicts(items)

    assert len(reports) == 1
    report = reports[0]
    assert report.resource_kind == INSTRUCTOR
    assert (report.first_id, report.second_id) == (1, 2)
    assert report.message == (
        'Instructor conflict: Amina Haddad scheduled for both "Retreat 1" and "Retreat 2"'
    )


@pytest.mark.unit
def test_pair_sharing_instructor_and_location_yields_two_reports() -> None:
    items = [
        retreat(1, date(2026, 3, 1), date(2026, 3, 5), "Amina Haddad", "Dune Hall"),
        retreat(2, date(2026, 3, 5), date(2026, 3, 7), "Amina Haddad", "Dune Hall"),
    ]

    reports = detect_conflicts(items)

    assert [r.resource_kind for r in reports] == [INSTRUCTOR, LOCATION]
    assert reports[1].message.startswith("Location conflict: Dune Hall booked for both")


@pytest.mark.unit
def test_resource_names_compare_case_and_whitespace_insensitively() -> None:
    items = [
        retreat(1, date(2026, 3, 1), date(2026, 3, 5), "  amina haddad ", None),
        retreat(2, date(2026, 3, 2), date(2026, 3, 3), "AMINA HADDAD", None),
    ]

    assert len(detect_conflicts(items)) == 1


@pytest.mark.unit
def test_missing_resources_never_conflict() -> None:
    items = [
        retreat(1, date(2026, 3, 1), date(2026, 3, 5), None, ""),
        retreat(2, date(2026, 3, 1), date(2026, 3, 5), None, "   "),
    ]

    assert detect_conflicts(items) == []


@pytest.mark.unit
def test_disjoint_retreats_do_not_conflict() -> None:
    items = [
        retreat(1, date(2026, 3, 1), date(2026, 3, 4), "Amina Haddad", "Dune Hall"),
        retreat(2, date(2026, 3, 5), date(2026, 3, 7), "Amina Haddad", "Dune Hall"),
    ]

    assert detect_conflicts(items) == []


@pytest.mark.unit
def test_back_to_back_activities_do_not_conflict() -> None:
    """A 09:00 session of 60 minutes ends before a 10:00 session starts."""
    first = ScheduledItem.from_activity(
        {"id": 1, "retreat_id": 1, "day": 1, "time": "09:00", "name": "Yoga",
         "duration_minutes": 60, "instructor": "Amina", "location": "Hall"},
        date(2026, 3, 1),
    )
    second = ScheduledItem.from_activity(
        {"id": 2, "retreat_id": 1, "day": 1, "time": "10:00", "name": "Breathwork",
         "duration_minutes": 30, "instructor": "Amina", "location": "Hall"},
        date(2026, 3, 1),
    )

    assert first.start == datetime(2026, 3, 1, 9, 0)
    assert first.end == datetime(2026, 3, 1, 9, 59)
    assert detect_conflicts([first, second]) == []


@pytest.mark.unit
def test_overlapping_activities_in_different_retreats_conflict() -> None:
    first = ScheduledItem.from_activity(
        {"id": 1, "retreat_id": 1, "day": 3, "time": "09:00", "name": "Yoga",
         "duration_minutes": 90, "instructor": "Amina", "location": "Hall"},
        date(2026, 3, 1),
    )
    second = ScheduledItem.from_activity(
        {"id": 2, "retreat_id": 2, "day": 1, "time": "10:00", "name": "Sound Bath",
         "duration_minutes": 60, "instructor": "Omar", "location": "Hall"},
        date(2026, 3, 3),
    )

    reports = detect_conflicts([first, second])

    assert len(reports) == 1
    assert reports[0].resource_kind == LOCATION
    assert reports[0].item_kind == ACTIVITY


@pytest.mark.unit
def test_retreats_and_activities_are_not_compared_with_each_other() -> None:
    whole = retreat(1, date(2026, 3, 1), date(2026, 3, 5), "Amina", "Hall")
    session = ScheduledItem.from_activity(
        {"id": 7, "retreat_id": 2, "day": 1, "time": "09:00", "name": "Yoga",
         "duration_minutes": 60, "instructor": "Amina", "location": "Hall"},
        date(2026, 3, 2),
    )

    assert detect_conflicts([whole, session]) == []


@pytest.mark.unit
def test_malformed_activity_time_raises_value_error() -> None:
    with pytest.raises(ValueError):
        ScheduledItem.from_activity(
            {"id": 1, "retreat_id": 1, "day": 1, "time": "nine", "name": "Yoga"},
            date(2026, 3, 1),
        )


@pytest.mark.unit
def test_normalize_resource() -> None:
    assert normalize_resource("  Dune Hall ") == "dune hall"
    assert normalize_resource("   ") is None
    assert normalize_resource(None) is None


@pytest.mark.unit
def test_resource_availability_marks_busy_days() -> None:
    items = [retreat(1, date(2026, 3, 2), date(2026, 3, 3), "Amina Haddad", "Dune Hall")]

    availability = resource_availability(items, date(2026, 3, 1), date(2026, 3, 4))

    assert availability["instructors"]["Amina Haddad"] == {
        date(2026, 3, 1): True,
        date(2026, 3, 2): False,
        date(2026, 3, 3): False,
        date(2026, 3, 4): True,
    }
    assert availability["locations"]["Dune Hall"][date(2026, 3, 2)] is False
