from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class WaitlistAddPayload(BaseModel):
    guest_id: int
    check_in_date: date
    check_out_date: date
    number_of_guests: int = Field(..., description="Party size")
    priority: Literal["NORMAL", "HIGH", "VIP"] = "NORMAL"
    special_requests: Optional[str] = None


class WaitlistPromotePayload(BaseModel):
    entry_ids: list[int] = Field(..., min_length=1, description="Entries to promote, in order")
