"""
Resource conflict detection across retreats and scheduled activities.

Two items conflict when their time ranges overlap and they share an
instructor or a location. Retreats are compared with retreats over their
whole offering window; activities are compared with activities over their
timed slot. Reports are informational and never block a write.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import structlog
from sqlalchemy.engine import Engine

from retreat_booking.config import DEBUG
from retreat_booking.db.readers.activities import get_activities_for_retreats
from retreat_booking.db.readers.retreats import get_retreats_in_window
from retreat_booking.metrics import conflicts_detected_total
from retreat_booking.utils.intervals import days_in_range, overlaps

logger = structlog.get_logger(__name__)

RETREAT = "RETREAT"
ACTIVITY = "ACTIVITY"
INSTRUCTOR = "INSTRUCTOR"
LOCATION = "LOCATION"

Bound = Union[date, datetime]


@dataclass(frozen=True)
class ScheduledItem:
    """
    A retreat or activity occupying an instructor and a location.

    Retreat bounds are dates; activity bounds are datetimes. Both are inclusive.
    """

    kind: str
    id: int
    name: str
    start: Bound
    end: Bound
    instructor: Optional[str] = None
    location: Optional[str] = None
    retreat_id: Optional[int] = None

    @classmethod
    def from_retreat(cls, row: Mapping[str, Any]) -> ScheduledItem:
        return cls(
            kind=RETREAT,
            id=row["id"],
            name=row["title"],
            start=row["start_date"],
            end=row["end_date"],
            instructor=row.get("instructor"),
            location=row.get("location"),
            retreat_id=row["id"],
        )

    @classmethod
    def from_activity(cls, row: Mapping[str, Any], retreat_start: date) -> ScheduledItem:
        """
        Place an activity on the calendar.

        The slot runs [start, start + duration); it is stored as an inclusive
        range ending one minute early so back-to-back sessions do not overlap.

        Raises:
            ValueError: If `time` is not "HH:MM"
        """
        hours, minutes = (int(part) for part in row["time"].split(":"))
        day = retreat_start + timedelta(days=row["day"] - 1)
        start = datetime.combine(day, time(hours, minutes))
        duration = max(int(row.get("duration_minutes") or 60), 1)
        return cls(
            kind=ACTIVITY,
            id=row["id"],
            name=row["name"],
            start=start,
            end=start + timedelta(minutes=duration - 1),
            instructor=row.get("instructor"),
            location=row.get("location"),
            retreat_id=row["retreat_id"],
        )


@dataclass(frozen=True)
class ConflictReport:
    resource_kind: str
    resource: str
    item_kind: str
    first_id: int
    first_name: str
    second_id: int
    second_name: str

    @property
    def message(self) -> str:
        if self.resource_kind == INSTRUCTOR:
            return (
                f'Instructor conflict: {self.resource} scheduled for both '
                f'"{self.first_name}" and "{self.second_name}"'
            )
        return (
            f'Location conflict: {self.resource} booked for both '
            f'"{self.first_name}" and "{self.second_name}"'
        )


def normalize_resource(value: Optional[str]) -> Optional[str]:
    """Comparison key for a resource name; None for blank values."""
    if value is None:
        return None
    key = value.strip().casefold()
    return key or None


def _shared_resources(a: ScheduledItem, b: ScheduledItem) -> list[tuple[str, str]]:
    shared = []
    instructor = normalize_resource(a.instructor)
    if instructor is not None and instructor == normalize_resource(b.instructor):
        shared.append((INSTRUCTOR, (a.instructor or "").strip()))
    location = normalize_resource(a.location)
    if location is not None and location == normalize_resource(b.location):
        shared.append((LOCATION, (a.location or "").strip()))
    return shared


def detect_conflicts(items: Sequence[ScheduledItem]) -> list[ConflictReport]:
    """
    Report every overlapping pair that shares an instructor or a location.

    Each unordered pair yields at most one report per resource kind, so a
    pair sharing both instructor and location yields two reports. Items of
    different kinds are never compared.

    Args:
        items: Retreats and/or activities to scan

    Returns:
        list[ConflictReport]: Conflicts in scan order
    """
    reports: list[ConflictReport] = []

    for i, first in enumerate(items):
        for second in items[i + 1 :]:
            if first.kind != second.kind:
                continue
            if not overlaps(first.start, first.end, second.start, second.end):
                continue
            for resource_kind, resource in _shared_resources(first, second):
                reports.append(
                    ConflictReport(
                        resource_kind=resource_kind,
                        resource=resource,
                        item_kind=first.kind,
                        first_id=first.id,
                        first_name=first.name,
                        second_id=second.id,
                        second_name=second.name,
                    )
                )

    return reports


def _as_date(bound: Bound) -> date:
    return bound.date() if isinstance(bound, datetime) else bound


def resource_availability(
    items: Iterable[ScheduledItem], window_start: date, window_end: date
) -> dict[str, dict[str, dict[date, bool]]]:
    """
    Build per-day availability maps for every instructor and location.

    A resource is unavailable on any day a retreat using it covers. Names
    are grouped by their normalized key and reported under the first
    spelling seen.

    Returns:
        dict: {"instructors": {name: {day: available}}, "locations": {...}}
    """
    retreats = [item for item in items if item.kind == RETREAT]
    window = list(days_in_range(window_start, window_end))

    def build(attribute: str) -> dict[str, dict[date, bool]]:
        names: dict[str, str] = {}
        busy: dict[str, set[date]] = {}
        for item in retreats:
            raw = getattr(item, attribute)
            key = normalize_resource(raw)
            if key is None:
                continue
            names.setdefault(key, raw.strip())
            days = busy.setdefault(key, set())
            days.update(days_in_range(_as_date(item.start), _as_date(item.end)))
        return {names[key]: {day: day not in busy[key] for day in window} for key in names}

    return {"instructors": build("instructor"), "locations": build("location")}


def load_scheduled_items(
    engine: Engine, window_start: date, window_end: date
) -> list[ScheduledItem]:
    """
    Load retreats intersecting the window and their scheduled activities.

    Activities with a malformed time are skipped with a warning.
    """
    with engine.connect() as conn:
        retreat_rows = get_retreats_in_window(conn, window_start, window_end)
        activity_rows = get_activities_for_retreats(conn, [row["id"] for row in retreat_rows])

    items = [ScheduledItem.from_retreat(row) for row in retreat_rows]
    starts = {row["id"]: row["start_date"] for row in retreat_rows}

    for row in activity_rows:
        try:
            items.append(ScheduledItem.from_activity(row, starts[row["retreat_id"]]))
        except ValueError:
            logger.warning("activity_time_invalid", activity_id=row["id"], time=row["time"])

    return items


def detect_schedule_conflicts(
    engine: Engine,
    window_start: date,
    window_end: date,
    items: Optional[Sequence[ScheduledItem]] = None,
) -> list[ConflictReport]:
    """
    Detect instructor and location conflicts for everything inside a window.

    Args:
        engine: SQLAlchemy engine
        window_start: First day of the window
        window_end: Last day of the window
        items: Items already loaded for this window; loaded here when omitted

    Returns:
        list[ConflictReport]: Retreat-level and activity-level conflicts
    """
    if items is None:
        items = load_scheduled_items(engine, window_start, window_end)
    reports = detect_conflicts(items)

    for report in reports:
        conflicts_detected_total.labels(resource_kind=report.resource_kind).inc()
        if DEBUG:
            logger.debug("schedule_conflict", message=report.message)

    logger.info(
        "schedule_conflicts_detected",
        window_start=window_start.isoformat(),
        window_end=window_end.isoformat(),
        items=len(items),
        conflicts=len(reports),
    )
    return reports
