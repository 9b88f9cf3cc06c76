"""Read-only views of persisted rows handed to callers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Optional

from booking_engine.domain.types import (
    BookingKind,
    BookingRange,
    BookingStatus,
    PaymentStatus,
    TransitionEvent,
)
from booking_engine.utils.datetime import ensure_utc


def _opt_utc(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


@dataclass(frozen=True)
class BookingRecord:
    """
    Snapshot of a booking row.

    Callers never mutate bookings through this object; status changes go
    through ``services.transitions.apply_transition``.
    """

    id: str
    property_id: str
    requester_id: str
    owner_id: str
    kind: BookingKind
    range: BookingRange
    status: BookingStatus
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    hold_expires_at: datetime
    version: int
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    owner_notes: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "BookingRecord":
        """Build a record from a ``bookings`` row (Row or mapping with attribute access)."""
        return cls(
            id=row.id,
            property_id=row.property_id,
            requester_id=row.requester_id,
            owner_id=row.owner_id,
            kind=BookingKind(row.kind),
            range=BookingRange(start=ensure_utc(row.start_at), end=ensure_utc(row.end_at)),
            status=BookingStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
            hold_expires_at=ensure_utc(row.hold_expires_at),
            version=row.version,
            cancelled_by=row.cancelled_by,
            cancelled_at=_opt_utc(row.cancelled_at),
            cancellation_reason=row.cancellation_reason,
            owner_notes=row.owner_notes,
        )

    @property
    def has_active_hold(self) -> bool:
        return self.status.holds_range

    @property
    def check_in(self) -> Optional[date]:
        return self.range.check_in if self.kind.is_interval else None

    @property
    def check_out(self) -> Optional[date]:
        return self.range.check_out if self.kind.is_interval else None


@dataclass(frozen=True)
class BookingStateChanged:
    """Outbound event emitted after every committed status change."""

    booking_id: str
    property_id: str
    from_status: Optional[BookingStatus]
    to_status: BookingStatus
    event: Optional[TransitionEvent]
    actor_id: str
    timestamp: datetime

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["from_status"] = self.from_status.value if self.from_status else None
        payload["to_status"] = self.to_status.value
        payload["event"] = self.event.value if self.event else None
        payload["timestamp"] = self.timestamp.isoformat()
        return payload


@dataclass(frozen=True)
class DateBlockRecord:
    id: str
    property_id: str
    start_date: date
    end_date: date
    reason: str
    notes: Optional[str]
    created_by: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any) -> "DateBlockRecord":
        return cls(
            id=row.id,
            property_id=row.property_id,
            start_date=row.start_date,
            end_date=row.end_date,
            reason=row.reason,
            notes=row.notes,
            created_by=row.created_by,
            created_at=ensure_utc(row.created_at),
        )

    @property
    def range(self) -> BookingRange:
        return BookingRange.for_stay(self.start_date, self.end_date)


@dataclass(frozen=True)
class AvailabilityCheck:
    is_available: bool
    conflicts: list[dict[str, str]]
