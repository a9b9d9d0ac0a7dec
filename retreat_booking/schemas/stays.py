from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class CheckInPayload(BaseModel):
    staff_member: Optional[str] = Field(None, description="Staff performing the check-in")
    actual_check_in_time: Optional[datetime] = Field(None, description="Defaults to now")
    room_number: Optional[str] = None
    additional_notes: Optional[str] = None


class CheckOutPayload(BaseModel):
    """
    Schema for checking a guest out. Charges are added to the reservation
    total; payment_processed settles the final total at the desk.
    """

    staff_member: Optional[str] = None
    actual_check_out_time: Optional[datetime] = None
    additional_charges: Decimal = Field(Decimal("0"), ge=0)
    damage_charges: Decimal = Field(Decimal("0"), ge=0)
    payment_processed: bool = False
    additional_notes: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5, description="Overall review rating")
