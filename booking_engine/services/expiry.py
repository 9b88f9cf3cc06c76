"""Expiry of pending bookings whose hold deadline passed without confirmation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.config import SWEEP_BATCH_SIZE
from booking_engine.db.readers.bookings import list_expired_pending
from booking_engine.domain.types import SYSTEM_ACTOR, TransitionEvent
from booking_engine.errors import BookingEngineError
from booking_engine.locks import PropertyLockRegistry, property_locks
from booking_engine.metrics import bookings_expired_total
from booking_engine.services.transitions import apply_transition
from booking_engine.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def sweep_expired_bookings(
    engine: Engine,
    now: Optional[datetime] = None,
    batch_size: int = SWEEP_BATCH_SIZE,
    locks: PropertyLockRegistry = property_locks,
) -> list[str]:
    """
    Expire one batch of stale pending bookings and release their holds.

    Each booking is expired through ``apply_transition`` under its property's
    lock. A booking that was approved, cancelled or paid in the meantime fails
    its transition; that failure is logged and the sweep moves on. Running the
    sweep twice, or from several processes, expires each booking once.

    Args:
        engine: SQLAlchemy Engine
        now: Reference time, defaults to the current UTC time
        batch_size: Maximum bookings examined in this sweep
        locks: Per-property lock registry

    Returns:
        list[str]: IDs of the bookings that were expired
    """
    now = now or utc_now()

    with engine.connect() as conn:
        candidates = list_expired_pending(conn, now, batch_size)

    expired: list[str] = []
    for booking_id, property_id in candidates:
        try:
            apply_transition(
                engine, booking_id, TransitionEvent.EXPIRE, SYSTEM_ACTOR, now=now, locks=locks
            )
            expired.append(booking_id)
        except BookingEngineError as e:
            logger.warning(
                "expiry_skipped",
                booking_id=booking_id,
                property_id=property_id,
                error=e.code,
                detail=e.message,
            )

    if expired:
        bookings_expired_total.inc(len(expired))
    logger.info(
        "expiry_sweep_completed",
        candidates=len(candidates),
        expired=len(expired),
    )
    return expired
