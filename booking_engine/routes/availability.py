"""Calendar, hold and date-block endpoints for a property."""

from __future__ import annotations

from datetime import date, time
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine

from booking_engine.db.readers.blocks import get_blocks
from booking_engine.db.readers.holds import get_active_holds
from booking_engine.dependencies import get_db_engine
from booking_engine.domain.validation import build_range
from booking_engine.schemas.availability import DateBlockCreatePayload
from booking_engine.services.availability import (
    block_dates,
    check_availability,
    get_unavailable_dates,
    unblock_dates,
)

router = APIRouter()


@router.get("/properties/{property_id}/holds")
def list_holds(property_id: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """
    List the property's active holds.

    Only ranges and kinds are returned, never who holds them.
    """
    with engine.connect() as conn:
        holds = get_active_holds(conn, property_id)
    return {
        "property_id": property_id,
        "holds": [held.public_view() for held in holds],
    }


@router.get("/properties/{property_id}/availability")
def read_availability(
    property_id: str,
    kind: str = Query(..., description="shortlet, rental or sale_inspection"),
    check_in: Optional[date] = Query(None),
    check_out: Optional[date] = Query(None),
    inspection_date: Optional[date] = Query(None),
    inspection_time: Optional[time] = Query(None),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Check whether a range could be booked right now.

    Example:
        >>> GET /properties/p1/availability?kind=shortlet&check_in=2024-03-05&check_out=2024-03-08
        {"property_id": "p1", "is_available": false, "conflicts": [...]}
    """
    booking_range = build_range(
        kind,
        check_in=check_in,
        check_out=check_out,
        inspection_date=inspection_date,
        inspection_time=inspection_time,
    )
    result = check_availability(engine, property_id, kind, booking_range)
    return {
        "property_id": property_id,
        "is_available": result.is_available,
        "conflicts": result.conflicts,
    }


@router.get("/properties/{property_id}/unavailable-dates")
def read_unavailable_dates(
    property_id: str,
    start: date = Query(..., description="Window start (inclusive)"),
    end: date = Query(..., description="Window end (exclusive)"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    dates = get_unavailable_dates(engine, property_id, start, end)
    return {
        "property_id": property_id,
        "unavailable_dates": [d.isoformat() for d in dates],
        "total_count": len(dates),
    }


@router.get("/properties/{property_id}/blocks")
def list_blocks(property_id: str, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    with engine.connect() as conn:
        blocks = get_blocks(conn, property_id)
    return {
        "property_id": property_id,
        "blocks": [
            {
                "id": block.id,
                "start_date": block.start_date.isoformat(),
                "end_date": block.end_date.isoformat(),
                "reason": block.reason,
                "notes": block.notes,
            }
            for block in blocks
        ],
    }


@router.post("/properties/{property_id}/blocks", status_code=status.HTTP_201_CREATED)
def create_block(
    property_id: str,
    payload: DateBlockCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, str]:
    block = block_dates(
        engine,
        property_id,
        payload.start_date,
        payload.end_date,
        payload.reason,
        payload.created_by,
        notes=payload.notes,
    )
    return {"id": block.id, "message": "Dates blocked"}


@router.delete("/properties/{property_id}/blocks/{block_id}")
def delete_block(
    property_id: str, block_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    removed = unblock_dates(engine, property_id, block_id)
    return {"id": block_id, "removed": removed}
