# booking_engine/main.py

from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_engine.config import ALLOWED_ORIGINS, SWEEPER_ENABLED
from booking_engine.error_handlers import register_error_handlers
from booking_engine.logging_config import setup_logging
from booking_engine.middleware import RequestIDMiddleware
from booking_engine.routes.availability import router as availability_router
from booking_engine.routes.bookings import router as bookings_router
from booking_engine.routes.health import router as health_router
from booking_engine.routes.internal import router as internal_router
from booking_engine.routes.metrics import router as metrics_router
from booking_engine.routes.payments import router as payments_router
from booking_engine.workers.expiry_sweeper import ExpirySweeper

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Booking Engine API",
    description="Availability, reservation and booking lifecycle for property listings",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

register_error_handlers(app)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(availability_router, tags=["Availability"])
app.include_router(payments_router, tags=["Payments"])
app.include_router(internal_router, tags=["Internal"])

_sweeper: Optional[ExpirySweeper] = None


@app.on_event("startup")
def startup_event() -> None:
    """Start the expiry sweeper on startup."""
    global _sweeper
    from booking_engine.db.engine import engine

    logger.info("FastAPI application starting up...")

    if SWEEPER_ENABLED:
        _sweeper = ExpirySweeper(engine)
        _sweeper.start()

    logger.info("FastAPI application initialized", sweeper_enabled=SWEEPER_ENABLED)


@app.on_event("shutdown")
def shutdown_event() -> None:
    """Stop the expiry sweeper before the process exits."""
    global _sweeper
    if _sweeper is not None:
        _sweeper.stop()
        _sweeper = None
    logger.info("FastAPI application shut down")
