"""
FastAPI middleware for request tracing and correlation.

Each request gets an ID that is echoed in the ``X-Request-ID`` response header
and bound into structlog's context, so every log line emitted while handling
the request (including the reservation and transition logs) carries it.
"""

from __future__ import annotations

import uuid
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add a request ID to each HTTP request.

    A caller-supplied ``X-Request-ID`` is reused so a booking request can be
    traced from the front-end through this service; otherwise a UUID is
    generated.

    Example:
        >>> app.add_middleware(RequestIDMiddleware)
        >>>
        >>> @router.post("/properties/{property_id}/bookings")
        >>> def create_booking(request: Request):
        ...     request_id = request.state.request_id
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
