from datetime import datetime
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from booking_engine.domain.records import BookingRecord
from booking_engine.domain.types import BookingStatus, PaymentStatus
from booking_engine.models.bookings import Booking


def insert_booking(conn: Connection, values: dict[str, Any]) -> None:
    """
    Insert a new booking row.

    Args:
        conn: Connection inside the coordinator's transaction
        values: Column values; must include ``id`` and the timestamps
    """
    conn.execute(insert(Booking).values(**values))


def update_booking_status(
    conn: Connection,
    booking: BookingRecord,
    to_status: BookingStatus,
    now: datetime,
    extra: dict[str, Any] | None = None,
) -> bool:
    """
    Compare-and-swap the status of a booking.

    The update only applies if the row still has the status and version the
    caller read, so a concurrent writer that got there first makes this a
    no-op instead of a lost update.

    Args:
        conn: Connection inside the transition's transaction
        booking: Snapshot the transition was decided on
        to_status: New status
        now: Timestamp for ``updated_at``
        extra: Additional columns to set (cancellation fields, owner notes)

    Returns:
        bool: True if exactly one row was updated
    """
    values: dict[str, Any] = {
        "status": to_status.value,
        "version": Booking.version + 1,
        "updated_at": now,
    }
    if extra:
        values.update(extra)

    result = conn.execute(
        update(Booking)
        .where(
            Booking.id == booking.id,
            Booking.status == booking.status.value,
            Booking.version == booking.version,
        )
        .values(**values)
    )
    return result.rowcount == 1


def update_payment_status(
    conn: Connection, booking_id: str, payment_status: PaymentStatus, now: datetime
) -> bool:
    """Record the payment collaborator's latest status for a booking."""
    result = conn.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .values(payment_status=payment_status.value, updated_at=now)
    )
    return result.rowcount == 1
