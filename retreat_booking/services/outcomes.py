"""
Typed results returned by the booking orchestrator.

Refusals are values, not exceptions: a caller that receives a
CapacityExceeded knows exactly what was refused and why, and the HTTP layer
maps every refusal to 409 Conflict using its `code`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar, Mapping, Optional


@dataclass(frozen=True)
class ReservationView:
    """Read-only snapshot of a reservation row."""

    id: int
    retreat_id: int
    guest_id: int
    check_in_date: date
    check_out_date: date
    number_of_guests: int
    status: str
    total_amount: Decimal
    paid_amount: Decimal
    payment_status: str
    payment_method: Optional[str] = None
    room_number: Optional[str] = None
    special_requests: Optional[str] = None
    notes: Optional[str] = None
    actual_check_in_time: Optional[datetime] = None
    check_in_staff: Optional[str] = None
    actual_check_out_time: Optional[datetime] = None
    check_out_staff: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ReservationView:
        return cls(
            id=row["id"],
            retreat_id=row["retreat_id"],
            guest_id=row["guest_id"],
            check_in_date=row["check_in_date"],
            check_out_date=row["check_out_date"],
            number_of_guests=row["number_of_guests"],
            status=row["status"],
            total_amount=Decimal(row["total_amount"]),
            paid_amount=Decimal(row["paid_amount"]),
            payment_status=row["payment_status"],
            payment_method=row.get("payment_method"),
            room_number=row.get("room_number"),
            special_requests=row.get("special_requests"),
            notes=row.get("notes"),
            actual_check_in_time=row.get("actual_check_in_time"),
            check_in_staff=row.get("check_in_staff"),
            actual_check_out_time=row.get("actual_check_out_time"),
            check_out_staff=row.get("check_out_staff"),
        )

    @property
    def remaining_balance(self) -> Decimal:
        return self.total_amount - self.paid_amount


@dataclass(frozen=True)
class Refusal:
    """Base for business refusals. `code` names the refusal in API payloads."""

    code: ClassVar[str] = "Refusal"

    def detail(self) -> dict[str, Any]:
        return {"error": self.code, **asdict(self)}


@dataclass(frozen=True)
class CapacityExceeded(Refusal):
    code: ClassVar[str] = "CapacityExceeded"

    retreat_id: int
    capacity: int
    committed: int
    requested: int

    @property
    def available(self) -> int:
        return max(self.capacity - self.committed, 0)

    def detail(self) -> dict[str, Any]:
        return {**super().detail(), "available": self.available}


@dataclass(frozen=True)
class AlreadyCheckedIn(Refusal):
    code: ClassVar[str] = "AlreadyCheckedIn"

    reservation_id: int
    checked_in_at: Optional[datetime] = None


@dataclass(frozen=True)
class NotCheckedIn(Refusal):
    code: ClassVar[str] = "NotCheckedIn"

    reservation_id: int


@dataclass(frozen=True)
class AlreadyCheckedOut(Refusal):
    code: ClassVar[str] = "AlreadyCheckedOut"

    reservation_id: int
    checked_out_at: Optional[datetime] = None


@dataclass(frozen=True)
class HasDependentLedgerEntries(Refusal):
    code: ClassVar[str] = "HasDependentLedgerEntries"

    reservation_id: int
    ledger_entries: int
    loyalty_transactions: int
    paid_amount: Decimal


@dataclass(frozen=True)
class InvalidStateTransition(Refusal):
    code: ClassVar[str] = "InvalidStateTransition"

    reservation_id: int
    current: str
    requested: str


@dataclass(frozen=True)
class PaymentUpdateResult:
    """
    Outcome of a payment update.

    The reservation fields are always committed when this is returned;
    `warnings` lists best-effort steps that did not happen: a confirmation
    refused for capacity, or a failed ledger mirror.
    """

    reservation: ReservationView
    delta: Decimal
    ledger_entry_id: Optional[int] = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CheckOutResult:
    reservation: ReservationView
    final_amount: Decimal
    review_points: int = 0
    new_tier: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PaymentSummary:
    reservation: ReservationView
    ledger_entries: list[dict[str, Any]]

    @property
    def remaining_balance(self) -> Decimal:
        return max(self.reservation.remaining_balance, Decimal("0"))
