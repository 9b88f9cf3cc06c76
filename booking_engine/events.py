"""
In-process publication of booking state changes.

Payment, messaging and notification collaborators subscribe here instead of
polling for booking changes. Events are published after the transaction that
produced them commits and after the property lock is released, so a slow or
failing subscriber can never hold up or undo a booking. The durable copy of
each event lives in the ``booking_events`` table.
"""

from __future__ import annotations

import threading
from typing import Callable

import structlog

from booking_engine.domain.records import BookingStateChanged

logger = structlog.get_logger(__name__)

Subscriber = Callable[[BookingStateChanged], None]


class EventBus:
    """
    Fan-out of ``BookingStateChanged`` events to registered callbacks.

    Example:
        >>> bus = EventBus()
        >>> received = []
        >>> unsubscribe = bus.subscribe(received.append)
        >>> bus.publish(change)
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for every state change.

        Returns:
            Callable: Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: BookingStateChanged) -> None:
        """
        Deliver an event to every subscriber.

        A subscriber that raises is logged and skipped; the others still run.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(change)
            except Exception as e:
                logger.exception(
                    "event_subscriber_failed",
                    booking_id=change.booking_id,
                    to_status=change.to_status.value,
                    subscriber=getattr(callback, "__name__", repr(callback)),
                    error=str(e),
                )

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._subscribers)


# Global bus instance
event_bus = EventBus()
