from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class DateBlockCreatePayload(BaseModel):
    """
    Schema for taking dates off a property's calendar.
    """

    start_date: date = Field(..., description="First blocked night")
    end_date: date = Field(..., description="Day after the last blocked night")
    reason: str = Field(..., description="maintenance, owner_blocked, admin_blocked or unavailable")
    created_by: str = Field(..., description="Owner or admin creating the block")
    notes: Optional[str] = Field(None, description="Free-form notes")


class PaymentEventPayload(BaseModel):
    """
    Schema for payment status changes reported by the payment collaborator.
    """

    booking_id: str = Field(..., description="Booking the payment belongs to")
    payment_status: str = Field(..., description="pending, partial, completed, failed or refunded")
