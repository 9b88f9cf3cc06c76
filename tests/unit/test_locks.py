"""
Unit tests for per-property locking.
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from booking_engine.errors import BusyError
from booking_engine.locks import PropertyLockRegistry, acquire_database_lock


def hold_lock_in_thread(
    registry: PropertyLockRegistry, property_id: str
) -> tuple[threading.Event, threading.Event, threading.Thread]:
    """Start a thread that holds ``property_id``'s lock until released."""
    acquired = threading.Event()
    release = threading.Event()

    def _hold() -> None:
        with registry.acquire(property_id, timeout=1.0):
            acquired.set()
            release.wait(5.0)

    thread = threading.Thread(target=_hold)
    thread.start()
    assert acquired.wait(1.0)
    return acquired, release, thread


@pytest.mark.unit
def test_acquire_times_out_with_busy_error() -> None:
    registry = PropertyLockRegistry()
    _, release, thread = hold_lock_in_thread(registry, "prop-1")

    try:
        with pytest.raises(BusyError) as exc_info:
            with registry.acquire("prop-1", timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()

    assert exc_info.value.property_id == "prop-1"
    assert exc_info.value.status_code == 503


@pytest.mark.unit
def test_different_properties_do_not_block_each_other() -> None:
    registry = PropertyLockRegistry()
    _, release, thread = hold_lock_in_thread(registry, "prop-1")

    try:
        with registry.acquire("prop-2", timeout=0.05):
            assert registry.size() == 2
    finally:
        release.set()
        thread.join()


@pytest.mark.unit
def test_idle_locks_are_evicted() -> None:
    registry = PropertyLockRegistry()
    _, release, thread = hold_lock_in_thread(registry, "prop-1")

    try:
        with pytest.raises(BusyError):
            with registry.acquire("prop-1", timeout=0.05):
                pass
        assert registry.size() == 1
    finally:
        release.set()
        thread.join()

    for n in range(50):
        with registry.acquire(f"prop-{n}", timeout=0.1):
            pass

    assert registry.size() == 0


@pytest.mark.unit
def test_lock_released_after_exception() -> None:
    registry = PropertyLockRegistry()

    with pytest.raises(RuntimeError):
        with registry.acquire("prop-1", timeout=0.1):
            raise RuntimeError("boom")

    with registry.acquire("prop-1", timeout=0.1):
        pass


@pytest.mark.unit
def test_database_lock_is_noop_outside_postgres() -> None:
    conn = MagicMock()
    conn.dialect.name = "sqlite"

    acquire_database_lock(conn, "prop-1", timeout=2.0)

    conn.execute.assert_not_called()


@pytest.mark.unit
def test_database_lock_uses_advisory_lock_on_postgres() -> None:
    conn = MagicMock()
    conn.dialect.name = "postgresql"

    acquire_database_lock(conn, "prop-1", timeout=2.0)

    assert conn.execute.call_count == 2
    timeout_stmt = str(conn.execute.call_args_list[0].args[0])
    lock_stmt = str(conn.execute.call_args_list[1].args[0])
    assert "lock_timeout = '2000ms'" in timeout_stmt
    assert "pg_advisory_xact_lock" in lock_stmt
    assert conn.execute.call_args_list[1].args[1] == {"key": "property:prop-1"}


@pytest.mark.unit
def test_database_lock_timeout_raises_busy() -> None:
    conn = MagicMock()
    conn.dialect.name = "postgresql"
    conn.execute.side_effect = [None, OperationalError("SELECT", {}, Exception("lock timeout"))]

    with pytest.raises(BusyError):
        acquire_database_lock(conn, "prop-1", timeout=1.0)
