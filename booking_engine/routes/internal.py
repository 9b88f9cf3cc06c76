from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from booking_engine.dependencies import get_db_engine
from booking_engine.services.expiry import sweep_expired_bookings

router = APIRouter()


@router.post("/internal/sweep")
def run_expiry_sweep(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """
    Run one expiry sweep now.

    The background sweeper does this on its own schedule; this endpoint is for
    cron-driven deployments that disable it, and for operators.
    """
    expired_ids = sweep_expired_bookings(engine)
    return {"status": "success", "expired_count": len(expired_ids), "ids": expired_ids}
