from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from booking_engine.domain.records import BookingRecord
from booking_engine.domain.types import SYSTEM_ACTOR


def reject_system_actor(v: str) -> str:
    """The system actor is reserved for the sweeper and payment follow-ups."""
    if v.strip().lower() == SYSTEM_ACTOR:
        raise ValueError(f"'{SYSTEM_ACTOR}' is reserved")
    return v


class ReservationCreatePayload(BaseModel):
    """
    Schema for requesting a booking on a property.

    Stays (shortlet, rental) send check_in/check_out; sale inspections send
    inspection_date/inspection_time.
    """

    requester_id: str = Field(..., description="User making the request")
    owner_id: str = Field(..., description="Property owner who approves the booking")
    kind: str = Field(..., description="shortlet, rental or sale_inspection")
    check_in: Optional[date] = Field(None, description="First night (stays)")
    check_out: Optional[date] = Field(None, description="Checkout day, not a night (stays)")
    inspection_date: Optional[date] = Field(None, description="Inspection day")
    inspection_time: Optional[time] = Field(None, description="Inspection start time, UTC unless an offset is given")

    @field_validator("requester_id", "owner_id")
    @classmethod
    def validate_party(cls, v: str) -> str:
        return reject_system_actor(v)


class TransitionPayload(BaseModel):
    """
    Schema for moving a booking along its lifecycle.

    ``expire`` is not accepted here; only the expiry sweeper issues it.
    """

    event: Literal["approve", "reject", "cancel", "complete"]
    actor_id: str = Field(..., description="User driving the change")
    notes: Optional[str] = Field(None, description="Owner notes or cancellation reason")

    @field_validator("actor_id")
    @classmethod
    def validate_actor(cls, v: str) -> str:
        return reject_system_actor(v)


class BookingResponse(BaseModel):
    id: str
    property_id: str
    requester_id: str
    owner_id: str
    kind: str
    status: str
    payment_status: str
    start_at: datetime
    end_at: datetime
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    hold_expires_at: datetime
    created_at: datetime
    updated_at: datetime
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    owner_notes: Optional[str] = None

    @classmethod
    def from_record(cls, booking: BookingRecord) -> "BookingResponse":
        return cls(
            id=booking.id,
            property_id=booking.property_id,
            requester_id=booking.requester_id,
            owner_id=booking.owner_id,
            kind=booking.kind.value,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            start_at=booking.range.start,
            end_at=booking.range.end,
            check_in=booking.check_in,
            check_out=booking.check_out,
            hold_expires_at=booking.hold_expires_at,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            cancelled_by=booking.cancelled_by,
            cancelled_at=booking.cancelled_at,
            cancellation_reason=booking.cancellation_reason,
            owner_notes=booking.owner_notes,
        )


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    page: int
    page_size: int
