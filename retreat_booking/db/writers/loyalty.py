import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection

from retreat_booking.models.guests import Guest
from retreat_booking.models.loyalty import LoyaltyTransaction
from retreat_booking.services.loyalty import PointsAwarded
from retreat_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def record_points(conn: Connection, award: PointsAwarded, reservation_id: int) -> int:
    """
    Record an EARNED transaction and add its points to the guest balance.

    Args:
        conn (Connection): SQLAlchemy DB connection (caller's transaction).
        award (PointsAwarded): Points decided by the loyalty service.
        reservation_id (int): Reservation the points relate to.

    Returns:
        int: Guest's new point balance
    """
    now = utc_now()
    conn.execute(
        insert(LoyaltyTransaction).values(
            guest_id=award.guest_id,
            reservation_id=reservation_id,
            type="EARNED",
            points=award.points,
            description=award.description,
            created_at=now,
        )
    )
    conn.execute(
        update(Guest)
        .where(Guest.id == award.guest_id)
        .values(loyalty_points=Guest.loyalty_points + award.points, updated_at=now)
    )
    balance = conn.execute(select(Guest.loyalty_points).where(Guest.id == award.guest_id)).scalar_one()

    logger.info(
        "loyalty_points_recorded",
        guest_id=award.guest_id,
        reservation_id=reservation_id,
        points=award.points,
        balance=balance,
    )
    return int(balance)


def set_loyalty_tier(conn: Connection, guest_id: int, tier: str) -> None:
    conn.execute(
        update(Guest).where(Guest.id == guest_id).values(loyalty_tier=tier, updated_at=utc_now())
    )
