"""
Reservation coordinator: the only way a booking comes into existence.

Checking for conflicts and committing the new hold happen under the
property's lock and inside one transaction, so two requests for overlapping
ranges on the same property can never both succeed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.config import HOLD_WINDOW_MINUTES
from booking_engine.db.readers.blocks import get_blocks_as_holds
from booking_engine.db.readers.bookings import get_booking
from booking_engine.db.readers.holds import get_active_holds
from booking_engine.db.writers.bookings import insert_booking
from booking_engine.db.writers.events import record_event
from booking_engine.db.writers.holds import add_hold
from booking_engine.domain.conflicts import find_conflicts
from booking_engine.domain.records import BookingRecord, BookingStateChanged
from booking_engine.domain.types import (
    BookingKind,
    BookingRange,
    BookingStatus,
    PaymentStatus,
)
from booking_engine.domain.validation import validate_reservation
from booking_engine.errors import BusyError, ConflictError, NotFoundError, ValidationError
from booking_engine.events import event_bus
from booking_engine.locks import PropertyLockRegistry, acquire_database_lock, property_locks
from booking_engine.metrics import reservations_total
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def reserve(
    engine: Engine,
    property_id: str,
    requester_id: str,
    owner_id: str,
    kind: BookingKind | str,
    booking_range: BookingRange,
    now: Optional[datetime] = None,
    hold_window_minutes: int = HOLD_WINDOW_MINUTES,
    locks: PropertyLockRegistry = property_locks,
) -> BookingRecord:
    """
    Create a pending booking and its hold if the range is free.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property being booked
        requester_id: User making the request
        owner_id: Property owner who approves or rejects
        kind: shortlet, rental or sale_inspection
        booking_range: Requested range (see ``domain.validation.build_range``)
        now: Reference time, defaults to the current UTC time
        hold_window_minutes: Minutes until an unconfirmed hold may be expired
        locks: Per-property lock registry

    Returns:
        BookingRecord: The new booking in ``pending`` status

    Raises:
        ValidationError: Malformed request; nothing was read or written
        ConflictError: The range overlaps an active hold or owner block
        BusyError: The property lock was not acquired in time
    """
    try:
        booking_kind = validate_reservation(
            property_id, requester_id, owner_id, kind, booking_range
        )
    except ValidationError:
        reservations_total.labels(kind=str(getattr(kind, "value", kind)), outcome="invalid").inc()
        raise

    now = now or utc_now()
    booking_id = str(uuid.uuid4())

    try:
        with locks.acquire(property_id):
            with engine.begin() as conn:
                acquire_database_lock(conn, property_id)

                existing = get_active_holds(conn, property_id)
                if booking_kind.is_interval:
                    existing += get_blocks_as_holds(conn, property_id)

                conflicts = find_conflicts(existing, booking_range, booking_kind)
                if conflicts:
                    raise ConflictError([c.public_view() for c in conflicts])

                insert_booking(
                    conn,
                    {
                        "id": booking_id,
                        "property_id": property_id,
                        "requester_id": requester_id,
                        "owner_id": owner_id,
                        "kind": booking_kind.value,
                        "start_at": booking_range.start,
                        "end_at": booking_range.end,
                        "status": BookingStatus.PENDING.value,
                        "payment_status": PaymentStatus.PENDING.value,
                        "hold_expires_at": now + timedelta(minutes=hold_window_minutes),
                        "version": 1,
                        "created_at": now,
                        "updated_at": now,
                    },
                )
                add_hold(conn, property_id, booking_id, booking_kind, booking_range)

                change = BookingStateChanged(
                    booking_id=booking_id,
                    property_id=property_id,
                    from_status=None,
                    to_status=BookingStatus.PENDING,
                    event=None,
                    actor_id=requester_id,
                    timestamp=now,
                )
                record_event(conn, change)
                booking = get_booking(conn, booking_id)
                if booking is None:
                    raise NotFoundError("Booking", booking_id)
    except ConflictError as e:
        reservations_total.labels(kind=booking_kind.value, outcome="conflict").inc()
        logger.info(
            "reserve_conflict",
            property_id=property_id,
            kind=booking_kind.value,
            requested=booking_range.to_dict(),
            conflicts=e.conflicts,
        )
        raise
    except BusyError:
        reservations_total.labels(kind=booking_kind.value, outcome="busy").inc()
        raise

    reservations_total.labels(kind=booking_kind.value, outcome="reserved").inc()
    logger.info(
        "booking_reserved",
        booking_id=booking_id,
        property_id=property_id,
        kind=booking_kind.value,
        start=booking_range.start.isoformat(),
        end=booking_range.end.isoformat(),
        hold_expires_at=booking.hold_expires_at.isoformat(),
    )

    event_bus.publish(change)
    return booking
