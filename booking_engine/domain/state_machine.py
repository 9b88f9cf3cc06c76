"""Booking state machine."""

from __future__ import annotations

from dataclasses import dataclass

from booking_engine.domain.types import SYSTEM_ACTOR, BookingStatus, TransitionEvent
from booking_engine.errors import InvalidTransitionError, PermissionDeniedError


@dataclass(frozen=True)
class Transition:
    to_status: BookingStatus
    releases_hold: bool


BOOKING_TRANSITIONS: dict[tuple[BookingStatus, TransitionEvent], Transition] = {
    (BookingStatus.PENDING, TransitionEvent.APPROVE): Transition(BookingStatus.CONFIRMED, False),
    (BookingStatus.PENDING, TransitionEvent.REJECT): Transition(BookingStatus.REJECTED, True),
    (BookingStatus.PENDING, TransitionEvent.CANCEL): Transition(BookingStatus.CANCELLED, True),
    (BookingStatus.PENDING, TransitionEvent.EXPIRE): Transition(BookingStatus.EXPIRED, True),
    (BookingStatus.CONFIRMED, TransitionEvent.COMPLETE): Transition(BookingStatus.COMPLETED, True),
    (BookingStatus.CONFIRMED, TransitionEvent.CANCEL): Transition(BookingStatus.CANCELLED, True),
}

# Who besides the system may drive each event
OWNER_EVENTS = frozenset({TransitionEvent.APPROVE, TransitionEvent.REJECT, TransitionEvent.COMPLETE})
PARTY_EVENTS = frozenset({TransitionEvent.CANCEL})


def next_transition(current: BookingStatus | str, event: TransitionEvent | str) -> Transition:
    """
    Look up the edge for ``(current, event)``.

    Raises:
        InvalidTransitionError: If the pair is not in the transition table
    """
    try:
        key = (BookingStatus(current), TransitionEvent(event))
    except ValueError:
        raise InvalidTransitionError(str(current), str(event), "unknown status or event")

    transition = BOOKING_TRANSITIONS.get(key)
    if transition is None:
        raise InvalidTransitionError(key[0].value, key[1].value)
    return transition


def assert_actor_allowed(
    event: TransitionEvent, actor_id: str, requester_id: str, owner_id: str
) -> None:
    """
    Check that ``actor_id`` may drive ``event`` on a booking.

    Raises:
        PermissionDeniedError: If the actor is not allowed
    """
    if actor_id == SYSTEM_ACTOR:
        return
    if event in OWNER_EVENTS and actor_id == owner_id:
        return
    if event in PARTY_EVENTS and actor_id in (requester_id, owner_id):
        return
    raise PermissionDeniedError(actor_id, event.value)
