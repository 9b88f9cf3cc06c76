"""
Per-property mutual exclusion.

Every read-then-write of a property's hold set runs under ``property_lock``:
reserve, hold release on transition, the expiry sweep and payment-driven
transitions. Two layers are used:

- An in-process ``threading.Lock`` per property id, enough for a single
  instance.
- On PostgreSQL, a transaction-scoped advisory lock keyed by the property id,
  so several instances sharing one database are serialized as well.

Locks for different properties never interact.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import OperationalError

from booking_engine.config import LOCK_TIMEOUT_SECONDS
from booking_engine.errors import BusyError
from booking_engine.metrics import lock_timeouts_total, lock_wait_seconds

logger = structlog.get_logger(__name__)


class PropertyLockRegistry:
    """
    Lazily created ``threading.Lock`` per property id.

    The registry itself is guarded by its own lock so two threads asking for
    the same property get the same lock object. An entry lives only while some
    thread holds or waits on it, so the registry is bounded by the number of
    properties in use at once.

    Example:
        >>> registry = PropertyLockRegistry()
        >>> with registry.acquire("prop-1", timeout=1.0):
        ...     pass
    """

    def __init__(self) -> None:
        # property_id -> [lock, number of threads holding or waiting]
        self._locks: dict[str, list] = {}
        self._registry_lock = threading.Lock()

    def _checkout(self, property_id: str) -> threading.Lock:
        with self._registry_lock:
            entry = self._locks.get(property_id)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[property_id] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, property_id: str) -> None:
        with self._registry_lock:
            entry = self._locks[property_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[property_id]

    @contextmanager
    def acquire(self, property_id: str, timeout: float = LOCK_TIMEOUT_SECONDS) -> Iterator[None]:
        """
        Hold the property's lock for the duration of the ``with`` block.

        Args:
            property_id: Property whose hold set is about to be read and written
            timeout: Seconds to wait before giving up

        Raises:
            BusyError: If the lock was not acquired within ``timeout``
        """
        lock = self._checkout(property_id)
        try:
            started = time.monotonic()
            acquired = lock.acquire(timeout=timeout)
            lock_wait_seconds.observe(time.monotonic() - started)

            if not acquired:
                lock_timeouts_total.inc()
                logger.warning("property_lock_timeout", property_id=property_id, timeout=timeout)
                raise BusyError(property_id, timeout)

            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(property_id)

    def size(self) -> int:
        with self._registry_lock:
            return len(self._locks)


# Process-wide registry shared by the coordinator, transitions and sweeper
property_locks = PropertyLockRegistry()


def acquire_database_lock(
    conn: Connection, property_id: str, timeout: float = LOCK_TIMEOUT_SECONDS
) -> None:
    """
    Take a transaction-scoped advisory lock for the property on PostgreSQL.

    The lock is released automatically at commit or rollback. On other
    backends this is a no-op and the in-process lock is the only guard.

    Args:
        conn: Connection inside an open transaction
        property_id: Property to lock
        timeout: Seconds to wait before giving up

    Raises:
        BusyError: If PostgreSQL reports a lock timeout
    """
    if conn.dialect.name != "postgresql":
        return

    try:
        conn.execute(text(f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'"))
        conn.execute(
            text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
            {"key": f"property:{property_id}"},
        )
    except OperationalError as e:
        lock_timeouts_total.inc()
        logger.warning("database_lock_timeout", property_id=property_id, error=str(e))
        raise BusyError(property_id, timeout) from e
