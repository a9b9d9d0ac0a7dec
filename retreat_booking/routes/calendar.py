"""
Calendar endpoint: retreats in a viewing window with conflicts and resource availability.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from retreat_booking.db.readers.retreats import get_committed_guests
from retreat_booking.dependencies import get_db_engine
from retreat_booking.errors import BookingError
from retreat_booking.routes._reservation_helpers import http_error_for
from retreat_booking.services.conflicts import (
    RETREAT,
    detect_schedule_conflicts,
    load_scheduled_items,
    resource_availability,
)
from retreat_booking.utils.datetime import utc_now
from retreat_booking.utils.windows import resolve_window

logger = structlog.get_logger(__name__)
router = APIRouter()


def _availability_list(maps: dict[str, dict[date, bool]]) -> list[dict[str, Any]]:
    return [
        {"name": name, "availability": {day.isoformat(): free for day, free in days.items()}}
        for name, days in maps.items()
    ]


@router.get("/calendar")
def calendar_endpoint(
    view: str = Query("month", description="day, week, month or list"),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    week_start: Optional[date] = Query(None),
    day: Optional[date] = Query(None),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Calendar data for a viewing window.

    Returns:
        dict: retreats, conflicts, resource availability and the resolved period
    """
    try:
        window_start, window_end = resolve_window(
            view, utc_now().date(), year=year, month=month, week_start=week_start, day=day
        )

        items = load_scheduled_items(engine, window_start, window_end)
        reports = detect_schedule_conflicts(engine, window_start, window_end, items=items)

        retreat_items = [item for item in items if item.kind == RETREAT]
        with engine.connect() as conn:
            committed = get_committed_guests(conn, [item.id for item in retreat_items])

        availability = resource_availability(items, window_start, window_end)

        logger.info(
            "calendar_served",
            view=view,
            window_start=window_start.isoformat(),
            window_end=window_end.isoformat(),
            retreats=len(retreat_items),
            conflicts=len(reports),
        )

        return {
            "retreats": [
                {
                    "id": item.id,
                    "title": item.name,
                    "start_date": item.start.isoformat(),
                    "end_date": item.end.isoformat(),
                    "instructor": item.instructor,
                    "location": item.location,
                    "current_guests": committed.get(item.id, 0),
                }
                for item in retreat_items
            ],
            "conflicts": [
                {
                    "message": report.message,
                    "resource_kind": report.resource_kind,
                    "resource": report.resource,
                    "item_kind": report.item_kind,
                    "first_id": report.first_id,
                    "second_id": report.second_id,
                }
                for report in reports
            ],
            "resource_availability": {
                "instructors": _availability_list(availability["instructors"]),
                "locations": _availability_list(availability["locations"]),
            },
            "period": {
                "start_date": window_start.isoformat(),
                "end_date": window_end.isoformat(),
                "view": view,
                "year": year,
                "month": month,
            },
        }

    except BookingError as e:
        raise http_error_for(e) from e
    except Exception as e:
        logger.exception("calendar_failed", view=view, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
