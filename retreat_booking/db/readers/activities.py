from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from retreat_booking.models.retreats import ScheduleActivity


def get_activities_for_retreats(conn: Connection, retreat_ids: list[int]) -> list[dict[str, Any]]:
    """
    Fetch scheduled activities for the given retreats.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        retreat_ids (list[int]): Retreats whose schedules to load.

    Returns:
        list[dict[str, Any]]: Activity rows ordered by retreat, day and time
    """
    if not retreat_ids:
        return []
    stmt = (
        select(ScheduleActivity.__table__)
        .where(ScheduleActivity.retreat_id.in_(retreat_ids))
        .order_by(ScheduleActivity.retreat_id, ScheduleActivity.day, ScheduleActivity.time)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]
