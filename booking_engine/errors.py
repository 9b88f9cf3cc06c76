"""
Typed errors raised by the scheduling core.

Every error carries structured fields so API handlers and background workers
can react without parsing message text. ``status_code`` is the HTTP status the
API layer answers with; ``code`` is the stable machine-readable identifier.
"""

from __future__ import annotations

from typing import Any


class BookingEngineError(Exception):
    """Base class for all scheduling core errors."""

    code = "booking_engine_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the error for an API response body.

        Returns:
            dict: ``{"error": <code>, "detail": <message>}`` plus subclass fields
        """
        return {"error": self.code, "detail": self.message}


class ValidationError(BookingEngineError):
    """Malformed booking input, rejected before any shared state is read."""

    code = "validation_error"
    status_code = 422

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(BookingEngineError):
    """
    The requested range overlaps an active hold (or an owner block).

    Only the conflicting ranges are exposed, never the other bookings'
    requester or owner, so callers can suggest alternative dates.
    """

    code = "conflict"
    status_code = 409

    def __init__(self, conflicts: list[dict[str, Any]], message: str | None = None) -> None:
        self.conflicts = conflicts
        super().__init__(message or "Requested range is not available")

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["conflicts"] = self.conflicts
        return body


class InvalidTransitionError(BookingEngineError):
    """A status change that is not legal from the booking's current status."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, current_status: str, event: str, reason: str | None = None) -> None:
        self.current_status = current_status
        self.event = event
        self.reason = reason
        message = f"Cannot apply '{event}' to a booking in status '{current_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["current_status"] = self.current_status
        body["event"] = self.event
        return body


class NotFoundError(BookingEngineError):
    code = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' not found")


class PermissionDeniedError(BookingEngineError):
    code = "permission_denied"
    status_code = 403

    def __init__(self, actor_id: str, event: str) -> None:
        self.actor_id = actor_id
        self.event = event
        super().__init__(f"Actor '{actor_id}' may not '{event}' this booking")


class BusyError(BookingEngineError):
    """The per-property lock could not be acquired in time. Safe to retry."""

    code = "busy"
    status_code = 503

    def __init__(self, property_id: str, timeout: float) -> None:
        self.property_id = property_id
        self.timeout = timeout
        super().__init__(
            f"Property '{property_id}' is busy (lock not acquired within {timeout:g}s)"
        )
