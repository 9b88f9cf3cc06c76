"""
Shared test configuration.

The service reads its settings from the environment at import time, so the
database URL and CORS origins are set here before anything imports
``booking_engine``. Tests run against a throwaway SQLite file unless
DATABASE_URL already points somewhere else.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from typing import Generator

_TEST_DB_DIR = tempfile.mkdtemp(prefix="booking-engine-tests-")

os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DB_DIR}/bookings.db")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["SWEEPER_ENABLED"] = "false"

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from booking_engine.db.engine import engine, init_db  # noqa: E402
from booking_engine.events import event_bus  # noqa: E402
from booking_engine.models.blocks import DateBlock  # noqa: E402
from booking_engine.models.bookings import Booking  # noqa: E402
from booking_engine.models.events import BookingEvent  # noqa: E402
from booking_engine.models.holds import Hold  # noqa: E402

# Fixed reference time; booking dates in tests are a few days after it
NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def db_engine() -> Generator[Engine, None, None]:
    """Engine with all booking tables created."""
    init_db(engine)
    yield engine


@pytest.fixture
def clean_db(db_engine: Engine) -> Generator[Engine, None, None]:
    """
    Empty every booking table before the test and drop event subscribers after it.
    """
    with db_engine.begin() as conn:
        for table in (BookingEvent, Hold, DateBlock, Booking):
            conn.execute(delete(table))

    yield db_engine

    event_bus.clear()


@pytest.fixture
def now() -> datetime:
    return NOW
