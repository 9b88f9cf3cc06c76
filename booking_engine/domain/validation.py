"""
Input validation for booking requests.

Runs before any lock is taken or any row is read, so a rejected request never
touches shared state. Errors are collected per field and raised together.
"""

from __future__ import annotations

from datetime import date, time, timezone
from typing import Optional

from booking_engine.config import INSPECTION_DURATION_MINUTES
from booking_engine.domain.types import BookingKind, BookingRange, BookingStatus
from booking_engine.errors import ValidationError


def parse_kind(kind: BookingKind | str) -> BookingKind:
    try:
        return BookingKind(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in BookingKind)
        raise ValidationError(
            f"Unknown booking kind '{kind}'",
            [{"field": "kind", "message": f"must be one of: {allowed}"}],
        )


def parse_statuses(statuses: Optional[list[str]]) -> list[BookingStatus]:
    """Parse a status filter, reporting every unknown value at once."""
    parsed: list[BookingStatus] = []
    unknown: list[str] = []
    for value in statuses or []:
        try:
            parsed.append(BookingStatus(value))
        except ValueError:
            unknown.append(value)
    if unknown:
        allowed = ", ".join(s.value for s in BookingStatus)
        raise ValidationError(
            f"Unknown booking status: {', '.join(unknown)}",
            [{"field": "status", "message": f"must be one of: {allowed}"}],
        )
    return parsed


def build_range(
    kind: BookingKind | str,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    inspection_date: Optional[date] = None,
    inspection_time: Optional[time] = None,
    inspection_duration_minutes: int = INSPECTION_DURATION_MINUTES,
) -> BookingRange:
    """
    Turn the date fields of a booking request into a normalized range.

    Stays need ``check_in`` and ``check_out``; inspections need
    ``inspection_date`` and ``inspection_time``.

    Raises:
        ValidationError: If a required field is missing or the stay is inverted
    """
    booking_kind = parse_kind(kind)
    errors: list[dict[str, str]] = []

    if booking_kind.is_interval:
        if check_in is None:
            errors.append({"field": "check_in", "message": "is required"})
        if check_out is None:
            errors.append({"field": "check_out", "message": "is required"})
        if check_in is not None and check_out is not None and check_out <= check_in:
            errors.append({"field": "check_out", "message": "must be after check_in"})
        if errors:
            raise ValidationError("Invalid stay dates", errors)
        return BookingRange.for_stay(check_in, check_out)  # type: ignore[arg-type]

    if inspection_date is None:
        errors.append({"field": "inspection_date", "message": "is required"})
    if inspection_time is None:
        errors.append({"field": "inspection_time", "message": "is required"})
    if errors:
        raise ValidationError("Invalid inspection slot", errors)
    return BookingRange.for_inspection(
        inspection_date, inspection_time, inspection_duration_minutes  # type: ignore[arg-type]
    )


def validate_reservation(
    property_id: str,
    requester_id: str,
    owner_id: str,
    kind: BookingKind | str,
    booking_range: BookingRange,
) -> BookingKind:
    """
    Check a reservation request is well formed.

    Returns:
        BookingKind: The parsed kind

    Raises:
        ValidationError: Listing every problem found
    """
    booking_kind = parse_kind(kind)
    errors: list[dict[str, str]] = []

    for field, value in (
        ("property_id", property_id),
        ("requester_id", requester_id),
        ("owner_id", owner_id),
    ):
        if not value or not str(value).strip():
            errors.append({"field": field, "message": "is required"})

    if requester_id and owner_id and requester_id == owner_id:
        errors.append({"field": "requester_id", "message": "owner cannot book own property"})

    if booking_range.start.tzinfo is None or booking_range.end.tzinfo is None:
        errors.append({"field": "range", "message": "must be timezone-aware"})
    elif not booking_range.start < booking_range.end:
        errors.append({"field": "range", "message": "start must be before end"})
    elif booking_kind.is_interval and (
        booking_range.start.astimezone(timezone.utc).time() != time.min
        or booking_range.end.astimezone(timezone.utc).time() != time.min
    ):
        errors.append({"field": "range", "message": "stays must cover whole nights"})

    if errors:
        raise ValidationError("Invalid booking request", errors)
    return booking_kind
