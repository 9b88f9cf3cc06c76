"""
Unit tests for the booking state machine and actor rules.
"""

from __future__ import annotations

import itertools

import pytest

from booking_engine.domain.state_machine import (
    BOOKING_TRANSITIONS,
    assert_actor_allowed,
    next_transition,
)
from booking_engine.domain.types import (
    ACTIVE_STATUSES,
    SYSTEM_ACTOR,
    TERMINAL_STATUSES,
    BookingStatus,
    TransitionEvent,
)
from booking_engine.errors import InvalidTransitionError, PermissionDeniedError

LEGAL = {
    (BookingStatus.PENDING, TransitionEvent.APPROVE): BookingStatus.CONFIRMED,
    (BookingStatus.PENDING, TransitionEvent.REJECT): BookingStatus.REJECTED,
    (BookingStatus.PENDING, TransitionEvent.CANCEL): BookingStatus.CANCELLED,
    (BookingStatus.PENDING, TransitionEvent.EXPIRE): BookingStatus.EXPIRED,
    (BookingStatus.CONFIRMED, TransitionEvent.COMPLETE): BookingStatus.COMPLETED,
    (BookingStatus.CONFIRMED, TransitionEvent.CANCEL): BookingStatus.CANCELLED,
}


@pytest.mark.unit
@pytest.mark.parametrize(
    "status,event", list(itertools.product(BookingStatus, TransitionEvent))
)
def test_every_status_event_pair(status: BookingStatus, event: TransitionEvent) -> None:
    """Legal pairs reach their target; every other pair is rejected."""
    if (status, event) in LEGAL:
        assert next_transition(status, event).to_status is LEGAL[(status, event)]
    else:
        with pytest.raises(InvalidTransitionError) as exc_info:
            next_transition(status, event)
        assert exc_info.value.current_status == status.value
        assert exc_info.value.event == event.value


@pytest.mark.unit
def test_transition_table_matches_legal_pairs() -> None:
    assert set(BOOKING_TRANSITIONS) == set(LEGAL)


@pytest.mark.unit
def test_hold_released_exactly_when_leaving_active_statuses() -> None:
    for (status, _event), transition in BOOKING_TRANSITIONS.items():
        assert status in ACTIVE_STATUSES
        assert transition.releases_hold == (transition.to_status in TERMINAL_STATUSES)


@pytest.mark.unit
def test_terminal_statuses_have_no_outgoing_edges() -> None:
    for status in TERMINAL_STATUSES:
        assert status.is_terminal
        assert not status.holds_range
        for event in TransitionEvent:
            with pytest.raises(InvalidTransitionError):
                next_transition(status, event)


@pytest.mark.unit
def test_unknown_status_or_event_is_invalid() -> None:
    with pytest.raises(InvalidTransitionError):
        next_transition("archived", "approve")
    with pytest.raises(InvalidTransitionError):
        next_transition("pending", "teleport")


@pytest.mark.unit
@pytest.mark.parametrize(
    "event,actor,allowed",
    [
        (TransitionEvent.APPROVE, "owner", True),
        (TransitionEvent.APPROVE, "guest", False),
        (TransitionEvent.APPROVE, SYSTEM_ACTOR, True),
        (TransitionEvent.REJECT, "owner", True),
        (TransitionEvent.REJECT, "guest", False),
        (TransitionEvent.COMPLETE, "owner", True),
        (TransitionEvent.COMPLETE, "guest", False),
        (TransitionEvent.CANCEL, "guest", True),
        (TransitionEvent.CANCEL, "owner", True),
        (TransitionEvent.CANCEL, "stranger", False),
        (TransitionEvent.EXPIRE, SYSTEM_ACTOR, True),
        (TransitionEvent.EXPIRE, "owner", False),
        (TransitionEvent.EXPIRE, "guest", False),
    ],
)
def test_actor_rules(event: TransitionEvent, actor: str, allowed: bool) -> None:
    if allowed:
        assert_actor_allowed(event, actor, requester_id="guest", owner_id="owner")
    else:
        with pytest.raises(PermissionDeniedError) as exc_info:
            assert_actor_allowed(event, actor, requester_id="guest", owner_id="owner")
        assert exc_info.value.actor_id == actor
        assert exc_info.value.status_code == 403
