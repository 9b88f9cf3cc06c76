"""
Closed vocabularies and value types for bookings.

Statuses, kinds and events are ``str`` enums so they compare equal to the raw
strings stored in the database and sent over the API.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum


class BookingKind(str, Enum):
    SHORTLET = "shortlet"
    RENTAL = "rental"
    SALE_INSPECTION = "sale_inspection"

    @property
    def is_interval(self) -> bool:
        """True for nightly stays, False for inspection slots."""
        return self is not BookingKind.SALE_INSPECTION


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def holds_range(self) -> bool:
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset(
    {
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
        BookingStatus.REJECTED,
        BookingStatus.EXPIRED,
    }
)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class TransitionEvent(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    EXPIRE = "expire"
    COMPLETE = "complete"


class BlockReason(str, Enum):
    MAINTENANCE = "maintenance"
    OWNER_BLOCKED = "owner_blocked"
    ADMIN_BLOCKED = "admin_blocked"
    UNAVAILABLE = "unavailable"


SYSTEM_ACTOR = "system"


def _midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


@dataclass(frozen=True)
class BookingRange:
    """
    Half-open UTC range ``[start, end)`` held by a booking.

    Stays run from check-in midnight to check-out midnight, so a checkout day
    is free for the next check-in. Inspections are a start instant plus a
    fixed duration.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Aware values are stored as UTC wall-clock time; naive ones are left
        # for validation to reject
        for name in ("start", "end"):
            value = getattr(self, name)
            if value.tzinfo is not None and value.utcoffset() != timedelta(0):
                object.__setattr__(self, name, value.astimezone(timezone.utc))

    @classmethod
    def for_stay(cls, check_in: date, check_out: date) -> "BookingRange":
        return cls(start=_midnight_utc(check_in), end=_midnight_utc(check_out))

    @classmethod
    def for_inspection(
        cls, inspection_date: date, inspection_time: time, duration_minutes: int
    ) -> "BookingRange":
        start = datetime.combine(inspection_date, inspection_time)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        else:
            start = start.astimezone(timezone.utc)
        return cls(start=start, end=start + timedelta(minutes=duration_minutes))

    @property
    def check_in(self) -> date:
        return self.start.date()

    @property
    def check_out(self) -> date:
        return self.end.date()

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def overlaps(self, other: "BookingRange") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class HeldRange:
    """An active hold as seen by the conflict detector."""

    booking_id: str | None
    kind: BookingKind
    range: BookingRange
    # Owner blocks have no booking behind them
    is_block: bool = False

    def public_view(self) -> dict[str, str]:
        """Conflict details safe to show to another requester."""
        view = self.range.to_dict()
        view["kind"] = "block" if self.is_block else self.kind.value
        return view
