"""
Conflict detection between a candidate range and a property's active holds.

Pure functions only: no I/O, no clock, no shared state.

Rules:
    - Stays (shortlet, rental) share the property's nights. Half-open ranges
      [a, b) and [c, d) conflict iff a < d and c < b, so a checkout day can be
      the next guest's check-in day.
    - Inspections conflict with each other when their start instants are less
      than ``minimum_gap_minutes`` apart, or when their slots overlap.
    - Inspections and stays are separate resources and never conflict.
    - Owner blocks are nightly ranges and only block stays.
"""

from __future__ import annotations

from typing import Iterable

from booking_engine.config import MINIMUM_GAP_MINUTES
from booking_engine.domain.types import BookingKind, BookingRange, HeldRange


def ranges_conflict(
    existing: HeldRange,
    candidate: BookingRange,
    kind: BookingKind,
    minimum_gap_minutes: int = MINIMUM_GAP_MINUTES,
) -> bool:
    """
    Decide whether one held range blocks the candidate.

    Args:
        existing: Active hold (or owner block) already on the property
        candidate: Range being requested
        kind: Booking kind of the candidate
        minimum_gap_minutes: Required spacing between inspection start times

    Returns:
        bool: True if the candidate may not be booked alongside ``existing``
    """
    if kind.is_interval != existing.kind.is_interval:
        return False

    if kind.is_interval:
        return existing.range.overlaps(candidate)

    if existing.range.overlaps(candidate):
        return True
    gap_seconds = abs((existing.range.start - candidate.start).total_seconds())
    return gap_seconds < minimum_gap_minutes * 60


def find_conflicts(
    existing_holds: Iterable[HeldRange],
    candidate: BookingRange,
    kind: BookingKind,
    minimum_gap_minutes: int = MINIMUM_GAP_MINUTES,
) -> list[HeldRange]:
    """Return every held range that conflicts with the candidate, in input order."""
    return [
        held
        for held in existing_holds
        if ranges_conflict(held, candidate, kind, minimum_gap_minutes)
    ]


def has_conflict(
    existing_holds: Iterable[HeldRange],
    candidate: BookingRange,
    kind: BookingKind,
    minimum_gap_minutes: int = MINIMUM_GAP_MINUTES,
) -> bool:
    return any(
        ranges_conflict(held, candidate, kind, minimum_gap_minutes) for held in existing_holds
    )
