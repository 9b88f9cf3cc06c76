"""
Inbound payment events.

The payment collaborator owns ``payment_status``; this module records what it
reports and, depending on configured policy, moves a pending booking on:
auto-confirm once paid, auto-cancel when the payment failed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.config import AUTO_CANCEL_ON_PAYMENT_FAILURE, AUTO_CONFIRM_ON_PAYMENT
from booking_engine.db.readers.bookings import get_booking, get_property_id
from booking_engine.db.writers.bookings import update_payment_status
from booking_engine.domain.records import BookingRecord
from booking_engine.domain.types import (
    SYSTEM_ACTOR,
    BookingStatus,
    PaymentStatus,
    TransitionEvent,
)
from booking_engine.errors import InvalidTransitionError, NotFoundError, ValidationError
from booking_engine.locks import PropertyLockRegistry, acquire_database_lock, property_locks
from booking_engine.services.transitions import apply_transition
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

PAYMENT_FAILED_REASON = "payment_failed"


def parse_payment_status(payment_status: PaymentStatus | str) -> PaymentStatus:
    try:
        return PaymentStatus(payment_status)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise ValidationError(
            f"Unknown payment status '{payment_status}'",
            [{"field": "payment_status", "message": f"must be one of: {allowed}"}],
        )


def _follow_up_event(
    booking: BookingRecord,
    payment_status: PaymentStatus,
    auto_confirm: bool,
    auto_cancel: bool,
) -> Optional[TransitionEvent]:
    if booking.status is not BookingStatus.PENDING:
        return None
    if payment_status is PaymentStatus.COMPLETED and auto_confirm:
        return TransitionEvent.APPROVE
    if payment_status is PaymentStatus.FAILED and auto_cancel:
        return TransitionEvent.CANCEL
    return None


def handle_payment_status_changed(
    engine: Engine,
    booking_id: str,
    payment_status: PaymentStatus | str,
    now: Optional[datetime] = None,
    auto_confirm: bool = AUTO_CONFIRM_ON_PAYMENT,
    auto_cancel: bool = AUTO_CANCEL_ON_PAYMENT_FAILURE,
    locks: PropertyLockRegistry = property_locks,
) -> BookingRecord:
    """
    Record a payment status reported by the payment collaborator.

    Args:
        engine: SQLAlchemy Engine
        booking_id: Booking the payment belongs to
        payment_status: pending, partial, completed, failed or refunded
        now: Reference time, defaults to the current UTC time
        auto_confirm: Approve a pending booking once payment completed
        auto_cancel: Cancel a pending booking when payment failed
        locks: Per-property lock registry

    Returns:
        BookingRecord: The booking after the payment status (and any follow-up
        transition) was applied

    Raises:
        ValidationError: Unknown payment status
        NotFoundError: No such booking
    """
    status = parse_payment_status(payment_status)
    now = now or utc_now()

    with engine.connect() as conn:
        property_id = get_property_id(conn, booking_id)
    if property_id is None:
        raise NotFoundError("Booking", booking_id)

    # The sweeper reads status and payment_status together under this lock
    with locks.acquire(property_id):
        with engine.begin() as conn:
            acquire_database_lock(conn, property_id)
            update_payment_status(conn, booking_id, status, now)
            booking = get_booking(conn, booking_id)
            if booking is None:
                raise NotFoundError("Booking", booking_id)

    logger.info(
        "payment_status_recorded",
        booking_id=booking_id,
        property_id=property_id,
        payment_status=status.value,
        booking_status=booking.status.value,
    )

    if booking.status.is_terminal and status in (PaymentStatus.COMPLETED, PaymentStatus.PARTIAL):
        logger.warning(
            "payment_for_inactive_booking",
            booking_id=booking_id,
            booking_status=booking.status.value,
        )

    follow_up = _follow_up_event(booking, status, auto_confirm, auto_cancel)
    if follow_up is None:
        return booking

    notes = PAYMENT_FAILED_REASON if follow_up is TransitionEvent.CANCEL else None
    try:
        return apply_transition(
            engine, booking_id, follow_up, SYSTEM_ACTOR, notes=notes, now=now, locks=locks
        )
    except InvalidTransitionError as e:
        # The booking moved on between recording the payment and acting on it
        logger.warning(
            "payment_follow_up_skipped",
            booking_id=booking_id,
            transition=follow_up.value,
            current_status=e.current_status,
        )
        with engine.connect() as conn:
            current = get_booking(conn, booking_id)
        if current is None:
            raise NotFoundError("Booking", booking_id)
        return current
