"""Inbound payment status events from the payment collaborator."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_db_engine
from booking_engine.schemas.availability import PaymentEventPayload
from booking_engine.schemas.bookings import BookingResponse
from booking_engine.services.payments import handle_payment_status_changed

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/payments/events", response_model=BookingResponse)
def receive_payment_event(
    payload: PaymentEventPayload,
    engine: Engine = Depends(get_db_engine),
) -> BookingResponse:
    """
    Record a payment status change for a booking.

    Depending on configuration, a completed payment confirms a pending booking
    and a failed payment cancels it.

    Args:
        payload: Booking ID and the new payment status

    Returns:
        BookingResponse: The booking after the event was applied
    """
    logger.info(
        "payment_event_received",
        booking_id=payload.booking_id,
        payment_status=payload.payment_status,
    )
    booking = handle_payment_status_changed(engine, payload.booking_id, payload.payment_status)
    return BookingResponse.from_record(booking)
