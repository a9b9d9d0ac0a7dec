"""
Loyalty accrual, review bonuses and tier upgrades.

The functions here decide how many points a guest earns and which tier they
reach; the orchestrator records the result with the loyalty writer inside
the check-in or check-out transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Mapping, Optional

from retreat_booking.config import (
    LOYALTY_SPEND_PER_POINT,
    REVIEW_BONUS_MIN_RATING,
    REVIEW_BONUS_POINTS,
)

TIERS = ("BRONZE", "SILVER", "GOLD", "PLATINUM")

# Highest threshold first
TIER_THRESHOLDS = (
    ("PLATINUM", 5000),
    ("GOLD", 2500),
    ("SILVER", 1000),
)


@dataclass(frozen=True)
class LoyaltyAccount:
    guest_id: int
    points: int
    tier: str
    program_active: bool

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LoyaltyAccount:
        return cls(
            guest_id=row["id"],
            points=int(row["loyalty_points"]),
            tier=row["loyalty_tier"],
            program_active=bool(row["loyalty_program_active"]),
        )


@dataclass(frozen=True)
class PointsAwarded:
    guest_id: int
    points: int
    description: str


def points_for_spend(total_amount: Decimal) -> int:
    """One point per LOYALTY_SPEND_PER_POINT spent, rounded down."""
    if total_amount <= 0:
        return 0
    return int((Decimal(total_amount) / LOYALTY_SPEND_PER_POINT).to_integral_value(ROUND_FLOOR))


def accrue(guest: LoyaltyAccount, total_amount: Decimal, stay_label: str) -> Optional[PointsAwarded]:
    """
    Points earned for a stay.

    Args:
        guest: Guest's loyalty account
        total_amount: Reservation total the points are based on
        stay_label: Retreat title, used in the transaction description

    Returns:
        Optional[PointsAwarded]: None when the guest is not in the program
    """
    if not guest.program_active:
        return None
    return PointsAwarded(
        guest_id=guest.guest_id,
        points=points_for_spend(total_amount),
        description=f"Stay completed - {stay_label}",
    )


def review_bonus(guest: LoyaltyAccount, rating: Optional[int]) -> Optional[PointsAwarded]:
    """Bonus for a review rated at least REVIEW_BONUS_MIN_RATING."""
    if not guest.program_active or rating is None or rating < REVIEW_BONUS_MIN_RATING:
        return None
    return PointsAwarded(
        guest_id=guest.guest_id,
        points=REVIEW_BONUS_POINTS,
        description="Review bonus - Thank you for your feedback!",
    )


def tier_for_points(points: int) -> str:
    for tier, threshold in TIER_THRESHOLDS:
        if points >= threshold:
            return tier
    return "BRONZE"


def next_tier(current: str, points: int) -> str:
    """
    Tier a guest should hold with `points`. Tiers never go down.

    Args:
        current: Tier the guest holds now
        points: Guest's current point balance

    Returns:
        str: `current` or a higher tier
    """
    earned = tier_for_points(points)
    current_rank = TIERS.index(current) if current in TIERS else 0
    return earned if TIERS.index(earned) > current_rank else current
