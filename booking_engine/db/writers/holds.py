"""
Availability store writes.

The coordinator checks for conflicts under the per-property lock before it
gets here; ``add_hold`` repeats the check against the stored holds so a bug
in a caller can never commit an overlapping hold.
"""

import structlog
from sqlalchemy import delete, insert
from sqlalchemy.engine import Connection

from booking_engine.db.readers.holds import get_active_holds
from booking_engine.domain.conflicts import find_conflicts
from booking_engine.domain.types import BookingKind, BookingRange
from booking_engine.errors import ConflictError
from booking_engine.models.holds import Hold
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def add_hold(
    conn: Connection,
    property_id: str,
    booking_id: str,
    kind: BookingKind,
    booking_range: BookingRange,
) -> None:
    """
    Register an active hold for a booking.

    Args:
        conn: Connection inside the caller's transaction
        property_id: Property being held
        booking_id: Booking that owns the hold
        kind: Booking kind, decides the overlap rule
        booking_range: Range being held

    Raises:
        ConflictError: If the hold would overlap another active hold
    """
    conflicts = find_conflicts(get_active_holds(conn, property_id), booking_range, kind)
    if conflicts:
        logger.error(
            "hold_rejected_overlap",
            property_id=property_id,
            booking_id=booking_id,
            conflicting=[c.booking_id for c in conflicts],
        )
        raise ConflictError([c.public_view() for c in conflicts])

    conn.execute(
        insert(Hold).values(
            booking_id=booking_id,
            property_id=property_id,
            kind=kind.value,
            start_at=booking_range.start,
            end_at=booking_range.end,
            created_at=utc_now(),
        )
    )


def remove_hold(conn: Connection, property_id: str, booking_id: str) -> bool:
    """
    Release a booking's hold. Removing a hold that is not there is a no-op.

    Args:
        conn: Connection inside the caller's transaction
        property_id: Property the hold belongs to
        booking_id: Booking whose hold is released

    Returns:
        bool: True if a hold row was deleted, False if there was none
    """
    result = conn.execute(
        delete(Hold).where(Hold.property_id == property_id, Hold.booking_id == booking_id)
    )
    return result.rowcount > 0
