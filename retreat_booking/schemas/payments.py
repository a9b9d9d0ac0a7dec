from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from retreat_booking.schemas.reservations import ReservationResponse


class PaymentUpdatePayload(BaseModel):
    """
    Schema for recording a payment. paid_amount is the total paid so far,
    not an increment.
    """

    paid_amount: Decimal = Field(..., description="Total amount paid so far")
    payment_method: Optional[str] = Field(None, description="card, cash, transfer, ...")
    payment_status: Optional[Literal["PENDING", "PARTIAL", "PAID"]] = Field(
        None, description="Override the derived payment status"
    )
    reference: Optional[str] = Field(None, description="External payment reference")


class PaymentUpdateResponse(BaseModel):
    reservation: ReservationResponse
    delta: Decimal
    ledger_entry_id: Optional[int] = None
    warnings: list[str] = []


class LedgerEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    category: str
    amount: Decimal
    status: str
    reference: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class PaymentSummaryResponse(BaseModel):
    reservation_id: int
    total_amount: Decimal
    paid_amount: Decimal
    remaining_balance: Decimal
    payment_status: str
    payment_method: Optional[str] = None
    ledger_entries: list[LedgerEntryResponse] = []
