"""
The single mutation path for booking status.

Every status change (owner approval, rejection, cancellation, completion and
expiry) goes through ``apply_transition``. It runs under the same
per-property lock as the reservation coordinator because releasing a hold
changes what a concurrent ``reserve`` would see.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.db.readers.bookings import PAID_STATUSES, get_booking, get_property_id
from booking_engine.db.writers.bookings import update_booking_status
from booking_engine.db.writers.events import record_event
from booking_engine.db.writers.holds import remove_hold
from booking_engine.domain.records import BookingRecord, BookingStateChanged
from booking_engine.domain.state_machine import assert_actor_allowed, next_transition
from booking_engine.domain.types import SYSTEM_ACTOR, TransitionEvent
from booking_engine.errors import InvalidTransitionError, NotFoundError, ValidationError
from booking_engine.events import event_bus
from booking_engine.locks import PropertyLockRegistry, acquire_database_lock, property_locks
from booking_engine.metrics import holds_released_total, transitions_total
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def parse_event(event: TransitionEvent | str) -> TransitionEvent:
    try:
        return TransitionEvent(event)
    except ValueError:
        allowed = ", ".join(e.value for e in TransitionEvent)
        raise ValidationError(
            f"Unknown event '{event}'",
            [{"field": "event", "message": f"must be one of: {allowed}"}],
        )


def _check_guards(booking: BookingRecord, event: TransitionEvent, now: datetime) -> None:
    """Time- and payment-based preconditions on top of the transition table."""
    if event is TransitionEvent.EXPIRE:
        if booking.hold_expires_at > now:
            raise InvalidTransitionError(
                booking.status.value, event.value, "hold deadline has not passed"
            )
        if booking.payment_status.value in PAID_STATUSES:
            raise InvalidTransitionError(
                booking.status.value, event.value, "payment already received"
            )

    if event is TransitionEvent.COMPLETE and booking.range.end > now:
        raise InvalidTransitionError(booking.status.value, event.value, "booking has not concluded")


def _extra_columns(
    event: TransitionEvent, actor_id: str, notes: Optional[str], now: datetime
) -> dict[str, Any]:
    if event is TransitionEvent.CANCEL:
        return {
            "cancelled_by": actor_id,
            "cancelled_at": now,
            "cancellation_reason": notes,
        }
    if event in (TransitionEvent.APPROVE, TransitionEvent.REJECT) and notes:
        return {"owner_notes": notes}
    return {}


def apply_transition(
    engine: Engine,
    booking_id: str,
    event: TransitionEvent | str,
    actor_id: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
    locks: PropertyLockRegistry = property_locks,
) -> BookingRecord:
    """
    Apply one state-machine event to a booking.

    Args:
        engine: SQLAlchemy Engine
        booking_id: Booking to transition
        event: approve, reject, cancel, expire or complete
        actor_id: User driving the change, or ``"system"``
        notes: Owner notes (approve/reject) or cancellation reason (cancel)
        now: Reference time, defaults to the current UTC time
        locks: Per-property lock registry

    Returns:
        BookingRecord: The booking after the transition

    Raises:
        ValidationError: Unknown event or missing actor
        NotFoundError: No such booking
        InvalidTransitionError: The event is not legal from the current status
        PermissionDeniedError: The actor may not drive this event
        BusyError: The property lock was not acquired in time
    """
    transition_event = parse_event(event)
    if not actor_id:
        raise ValidationError(
            "Actor is required", [{"field": "actor_id", "message": "is required"}]
        )
    now = now or utc_now()

    with engine.connect() as conn:
        property_id = get_property_id(conn, booking_id)
    if property_id is None:
        raise NotFoundError("Booking", booking_id)

    with locks.acquire(property_id):
        with engine.begin() as conn:
            acquire_database_lock(conn, property_id)

            booking = get_booking(conn, booking_id, for_update=True)
            if booking is None:
                raise NotFoundError("Booking", booking_id)

            transition = next_transition(booking.status, transition_event)
            assert_actor_allowed(
                transition_event, actor_id, booking.requester_id, booking.owner_id
            )
            _check_guards(booking, transition_event, now)

            updated = update_booking_status(
                conn,
                booking,
                transition.to_status,
                now,
                _extra_columns(transition_event, actor_id, notes, now),
            )
            if not updated:
                raise InvalidTransitionError(
                    booking.status.value, transition_event.value, "booking changed concurrently"
                )

            if transition.releases_hold:
                remove_hold(conn, property_id, booking_id)

            change = BookingStateChanged(
                booking_id=booking_id,
                property_id=property_id,
                from_status=booking.status,
                to_status=transition.to_status,
                event=transition_event,
                actor_id=actor_id,
                timestamp=now,
            )
            record_event(conn, change)
            result = get_booking(conn, booking_id)
            if result is None:
                raise NotFoundError("Booking", booking_id)

    transitions_total.labels(
        event=transition_event.value, to_status=transition.to_status.value
    ).inc()
    if transition.releases_hold:
        holds_released_total.labels(to_status=transition.to_status.value).inc()

    logger.info(
        "booking_transitioned",
        booking_id=booking_id,
        property_id=property_id,
        transition=transition_event.value,
        from_status=booking.status.value,
        to_status=transition.to_status.value,
        actor_id=actor_id,
        system=actor_id == SYSTEM_ACTOR,
    )

    event_bus.publish(change)
    return result
