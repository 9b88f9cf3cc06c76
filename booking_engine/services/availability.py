"""
Read-side availability queries and owner date blocks.

``check_availability`` and ``get_unavailable_dates`` answer calendar questions
without taking the property lock; their answer can be stale by the time a
booking is requested, and ``reserve`` re-checks under the lock anyway.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.db.readers.blocks import get_blocks, get_blocks_as_holds
from booking_engine.db.readers.holds import get_active_holds
from booking_engine.db.writers.blocks import delete_block, insert_block
from booking_engine.domain.conflicts import find_conflicts
from booking_engine.domain.records import AvailabilityCheck, DateBlockRecord
from booking_engine.domain.types import BlockReason, BookingKind, BookingRange
from booking_engine.domain.validation import parse_kind
from booking_engine.errors import ConflictError, ValidationError
from booking_engine.locks import PropertyLockRegistry, acquire_database_lock, property_locks
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

# Longest window a single calendar query may cover
MAX_CALENDAR_DAYS = 366


def check_availability(
    engine: Engine,
    property_id: str,
    kind: BookingKind | str,
    booking_range: BookingRange,
) -> AvailabilityCheck:
    """
    Report whether a range could be reserved right now.

    Args:
        engine: SQLAlchemy Engine
        property_id: Property to check
        kind: Booking kind of the would-be request
        booking_range: Requested range

    Returns:
        AvailabilityCheck: ``is_available`` and the conflicting ranges, if any
    """
    booking_kind = parse_kind(kind)
    if not booking_range.start < booking_range.end:
        raise ValidationError(
            "Invalid range", [{"field": "range", "message": "start must be before end"}]
        )

    with engine.connect() as conn:
        existing = get_active_holds(conn, property_id)
        if booking_kind.is_interval:
            existing += get_blocks_as_holds(conn, property_id)

    conflicts = find_conflicts(existing, booking_range, booking_kind)
    return AvailabilityCheck(
        is_available=not conflicts,
        conflicts=[c.public_view() for c in conflicts],
    )


def get_unavailable_dates(
    engine: Engine, property_id: str, start: date, end: date
) -> list[date]:
    """
    List the nights in ``[start, end)`` that a stay could not include.

    A night is unavailable when a pending/confirmed stay or an owner block
    covers it. Inspection slots do not make a night unavailable.

    Raises:
        ValidationError: If the window is inverted or longer than a year
    """
    if end <= start:
        raise ValidationError(
            "Invalid window", [{"field": "end", "message": "must be after start"}]
        )
    if (end - start).days > MAX_CALENDAR_DAYS:
        raise ValidationError(
            "Window too large",
            [{"field": "end", "message": f"window may span at most {MAX_CALENDAR_DAYS} days"}],
        )

    window = BookingRange.for_stay(start, end)
    with engine.connect() as conn:
        ranges = [
            held.range
            for held in get_active_holds(conn, property_id)
            if held.kind.is_interval and held.range.overlaps(window)
        ]
        ranges += [block.range for block in get_blocks(conn, property_id, start, end)]

    unavailable: set[date] = set()
    for held in ranges:
        night = max(held.check_in, start)
        last = min(held.check_out, end)
        while night < last:
            unavailable.add(night)
            night += timedelta(days=1)

    return sorted(unavailable)


def block_dates(
    engine: Engine,
    property_id: str,
    start_date: date,
    end_date: date,
    reason: BlockReason | str,
    created_by: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
    locks: PropertyLockRegistry = property_locks,
) -> DateBlockRecord:
    """
    Take ``[start_date, end_date)`` off a property's calendar for stays.

    Raises:
        ValidationError: Inverted range, unknown reason or missing creator
        ConflictError: A pending or confirmed stay already holds some of the nights
    """
    errors: list[dict[str, str]] = []
    if end_date <= start_date:
        errors.append({"field": "end_date", "message": "must be after start_date"})
    try:
        block_reason = BlockReason(reason)
    except ValueError:
        errors.append({"field": "reason", "message": "unknown block reason"})
    if not created_by:
        errors.append({"field": "created_by", "message": "is required"})
    if errors:
        raise ValidationError("Invalid date block", errors)

    block = DateBlockRecord(
        id=str(uuid.uuid4()),
        property_id=property_id,
        start_date=start_date,
        end_date=end_date,
        reason=block_reason.value,
        notes=notes,
        created_by=created_by,
        created_at=now or utc_now(),
    )

    with locks.acquire(property_id):
        with engine.begin() as conn:
            acquire_database_lock(conn, property_id)
            conflicts = find_conflicts(
                get_active_holds(conn, property_id), block.range, BookingKind.SHORTLET
            )
            if conflicts:
                raise ConflictError(
                    [c.public_view() for c in conflicts],
                    "Dates are held by an active booking",
                )
            insert_block(conn, block)

    logger.info(
        "dates_blocked",
        property_id=property_id,
        block_id=block.id,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
        reason=block.reason,
    )
    return block


def unblock_dates(
    engine: Engine,
    property_id: str,
    block_id: str,
    locks: PropertyLockRegistry = property_locks,
) -> bool:
    """Remove a date block. Removing a block that is already gone is a no-op."""
    with locks.acquire(property_id):
        with engine.begin() as conn:
            acquire_database_lock(conn, property_id)
            removed = delete_block(conn, property_id, block_id)

    logger.info("dates_unblocked", property_id=property_id, block_id=block_id, removed=removed)
    return removed
