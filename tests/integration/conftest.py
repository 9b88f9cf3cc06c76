"""
Fixtures for tests that read and write the booking tables.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Callable

import pytest
from sqlalchemy.engine import Engine

from booking_engine.domain.records import BookingRecord
from booking_engine.domain.types import BookingRange
from booking_engine.locks import PropertyLockRegistry
from booking_engine.services.reservations import reserve

PROPERTY_ID = "prop-lekki-01"
OWNER_ID = "owner-ade"
GUEST_ID = "guest-bisi"


@pytest.fixture(autouse=True)
def _clean_tables(clean_db: Engine) -> None:
    """Every integration test starts from empty tables."""


@pytest.fixture
def locks() -> PropertyLockRegistry:
    """A lock registry private to the test."""
    return PropertyLockRegistry()


@pytest.fixture
def reserve_stay(
    clean_db: Engine, now: datetime, locks: PropertyLockRegistry
) -> Callable[..., BookingRecord]:
    """
    Reserve a shortlet stay with sensible defaults.

    Example:
        >>> booking = reserve_stay(date(2024, 3, 5), date(2024, 3, 8))
    """

    def _reserve(
        check_in: date,
        check_out: date,
        requester_id: str = GUEST_ID,
        property_id: str = PROPERTY_ID,
        kind: str = "shortlet",
        **kwargs: Any,
    ) -> BookingRecord:
        kwargs.setdefault("now", now)
        kwargs.setdefault("locks", locks)
        return reserve(
            clean_db,
            property_id=property_id,
            requester_id=requester_id,
            owner_id=OWNER_ID,
            kind=kind,
            booking_range=BookingRange.for_stay(check_in, check_out),
            **kwargs,
        )

    return _reserve


@pytest.fixture
def reserve_inspection(
    clean_db: Engine, now: datetime, locks: PropertyLockRegistry
) -> Callable[..., BookingRecord]:
    """Reserve a 30-minute sale inspection."""

    def _reserve(
        day: date,
        start: time,
        requester_id: str = GUEST_ID,
        property_id: str = PROPERTY_ID,
    ) -> BookingRecord:
        return reserve(
            clean_db,
            property_id=property_id,
            requester_id=requester_id,
            owner_id=OWNER_ID,
            kind="sale_inspection",
            booking_range=BookingRange.for_inspection(day, start, 30),
            now=now,
            locks=locks,
        )

    return _reserve
