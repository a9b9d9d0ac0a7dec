from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReservationCreatePayload(BaseModel):
    """
    Schema for booking a retreat. total_amount defaults to price x party size.
    """

    guest_id: int = Field(..., description="Guest making the booking")
    check_in_date: date = Field(..., description="First day of the stay")
    check_out_date: date = Field(..., description="Last day of the stay (inclusive)")
    number_of_guests: int = Field(..., description="Party size")
    status: Literal["PENDING", "CONFIRMED"] = Field("PENDING", description="Initial status")
    total_amount: Optional[Decimal] = Field(None, description="Price of the stay")
    room_number: Optional[str] = Field(None, description="Room assignment")
    special_requests: Optional[str] = Field(None, description="Guest requests")
    notes: Optional[str] = Field(None, description="Staff notes")


class ReservationUpdatePayload(BaseModel):
    """
    Schema for updating a reservation. All fields are optional; only the
    fields sent are changed.
    """

    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    number_of_guests: Optional[int] = None
    status: Optional[Literal["PENDING", "CONFIRMED", "COMPLETED", "CANCELLED"]] = None
    total_amount: Optional[Decimal] = None
    room_number: Optional[str] = None
    special_requests: Optional[str] = None
    notes: Optional[str] = None


class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
