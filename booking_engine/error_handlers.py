"""
Exception handlers mapping scheduling errors to HTTP responses.

Route handlers let ``BookingEngineError`` subclasses propagate; the handler
here turns each into its status code and structured body. Anything else is
logged with its traceback and answered with a generic 500.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from booking_engine.errors import BookingEngineError, BusyError

logger = structlog.get_logger(__name__)

# Seconds a client should wait before retrying a busy property
BUSY_RETRY_AFTER_SECONDS = 1


async def booking_engine_error_handler(request: Request, exc: BookingEngineError) -> JSONResponse:
    """
    Render a scheduling error as JSON.

    Returns:
        JSONResponse: ``exc.status_code`` with ``exc.to_dict()`` as body
    """
    logger.info(
        "request_rejected",
        path=request.url.path,
        method=request.method,
        error=exc.code,
        status_code=exc.status_code,
        request_id=getattr(request.state, "request_id", None),
    )

    headers = None
    if isinstance(exc, BusyError):
        headers = {"Retry-After": str(BUSY_RETRY_AFTER_SECONDS)}

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request_failed",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingEngineError, booking_engine_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
