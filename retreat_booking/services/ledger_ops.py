"""Ledger operations shared by the reconciliation engine and the ledger writer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

BOOKING_INCOME_TYPE = "INCOME"
BOOKING_INCOME_CATEGORY = "RETREAT_BOOKING"


@dataclass(frozen=True)
class LedgerOp:
    """
    Write needed to make the booking-income entry mirror the paid amount.

    `entry_id` is None for a create.
    """

    action: str
    amount: Decimal
    status: str
    entry_id: Optional[int] = None
