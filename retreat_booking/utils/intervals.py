"""
Closed-interval overlap arithmetic for stays and scheduled items.

All ranges are inclusive on both ends: a stay ending on the 10th and one
starting on the 10th overlap, and a zero-length stay (start == end) occupies
one day.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional

COUNTED_STATUSES = frozenset({"CONFIRMED", "COMPLETED"})


@dataclass(frozen=True)
class Stay:
    """A reservation's claim on capacity, as seen by the capacity guard."""

    start: date
    end: date
    party_size: int
    status: str
    reservation_id: Optional[int] = None

    @property
    def counts_toward_capacity(self) -> bool:
        return self.status in COUNTED_STATUSES


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """
    Return True when [a_start, a_end] and [b_start, b_end] share any point.

    Works for any mutually comparable bounds (dates or datetimes).
    """
    return a_start <= b_end and b_start <= a_end


def aggregate_quantity(candidate_start: date, candidate_end: date, existing: Iterable[Stay]) -> int:
    """
    Sum the party sizes of counted stays overlapping the candidate range.

    PENDING and CANCELLED stays never count.

    Args:
        candidate_start: First day of the candidate stay
        candidate_end: Last day of the candidate stay
        existing: Stays already recorded against the same retreat

    Returns:
        int: Guests already committed during the candidate range
    """
    return sum(
        stay.party_size
        for stay in existing
        if stay.counts_toward_capacity
        and overlaps(candidate_start, candidate_end, stay.start, stay.end)
    )


def days_in_range(start: date, end: date) -> Iterator[date]:
    """Yield each calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
