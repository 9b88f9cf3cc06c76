from typing import Any, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine

from booking_engine.db.readers.bookings import get_booking, list_property_bookings, list_user_bookings
from booking_engine.db.readers.events import list_booking_events
from booking_engine.dependencies import get_db_engine
from booking_engine.domain.validation import build_range, parse_kind, parse_statuses
from booking_engine.errors import NotFoundError
from booking_engine.schemas.bookings import (
    BookingListResponse,
    BookingResponse,
    ReservationCreatePayload,
    TransitionPayload,
)
from booking_engine.services.reservations import reserve
from booking_engine.services.transitions import apply_transition

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/properties/{property_id}/bookings",
    status_code=status.HTTP_201_CREATED,
    response_model=BookingResponse,
)
def create_booking(
    property_id: str,
    payload: ReservationCreatePayload,
    engine: Engine = Depends(get_db_engine),
) -> BookingResponse:
    """
    Request a booking. The range is held as ``pending`` until the owner acts
    or the hold expires.

    Args:
        property_id: Property to book
        payload: Requester, owner, kind and dates

    Returns:
        BookingResponse: The new pending booking

    Errors:
        422 on malformed input, 409 with the conflicting ranges when the dates
        are taken, 503 when the property is busy.
    """
    booking_range = build_range(
        payload.kind,
        check_in=payload.check_in,
        check_out=payload.check_out,
        inspection_date=payload.inspection_date,
        inspection_time=payload.inspection_time,
    )
    booking = reserve(
        engine,
        property_id=property_id,
        requester_id=payload.requester_id,
        owner_id=payload.owner_id,
        kind=payload.kind,
        booking_range=booking_range,
    )
    return BookingResponse.from_record(booking)


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def read_booking(booking_id: str, engine: Engine = Depends(get_db_engine)) -> BookingResponse:
    with engine.connect() as conn:
        booking = get_booking(conn, booking_id)
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    return BookingResponse.from_record(booking)


@router.post("/bookings/{booking_id}/transitions", response_model=BookingResponse)
def transition_booking(
    booking_id: str,
    payload: TransitionPayload,
    engine: Engine = Depends(get_db_engine),
) -> BookingResponse:
    """
    Approve, reject, cancel or complete a booking.

    A 409 ``invalid_transition`` means the booking's status changed since the
    caller last read it; the caller should refresh.
    """
    booking = apply_transition(
        engine,
        booking_id,
        payload.event,
        payload.actor_id,
        notes=payload.notes,
    )
    return BookingResponse.from_record(booking)


@router.get("/bookings/{booking_id}/events")
def read_booking_events(
    booking_id: str, engine: Engine = Depends(get_db_engine)
) -> dict[str, Any]:
    """Return the booking's state-change history, oldest first."""
    with engine.connect() as conn:
        if get_booking(conn, booking_id) is None:
            raise NotFoundError("Booking", booking_id)
        events = list_booking_events(conn, booking_id)
    return {"booking_id": booking_id, "events": events}


@router.get("/properties/{property_id}/bookings", response_model=BookingListResponse)
def list_bookings_for_property(
    property_id: str,
    status_filter: Optional[list[str]] = Query(None, alias="status"),
    kind: Optional[str] = Query(None, description="shortlet, rental or sale_inspection"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    engine: Engine = Depends(get_db_engine),
) -> BookingListResponse:
    """
    List a property's bookings, oldest range first.

    Example:
        >>> GET /properties/p1/bookings?status=pending&status=confirmed&kind=sale_inspection
    """
    statuses = parse_statuses(status_filter)
    booking_kind = parse_kind(kind) if kind else None
    with engine.connect() as conn:
        bookings = list_property_bookings(
            conn,
            property_id,
            statuses=statuses,
            kind=booking_kind,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
    return BookingListResponse(
        bookings=[BookingResponse.from_record(b) for b in bookings],
        page=page,
        page_size=page_size,
    )


@router.get("/bookings", response_model=BookingListResponse)
def list_bookings_for_user(
    user_id: str = Query(..., min_length=1, description="Requester or owner ID"),
    role: Literal["requester", "owner"] = Query("requester"),
    status_filter: Optional[list[str]] = Query(None, alias="status"),
    kind: Optional[str] = Query(None, description="shortlet, rental or sale_inspection"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    engine: Engine = Depends(get_db_engine),
) -> BookingListResponse:
    """List bookings a user made (``role=requester``) or received as owner (``role=owner``)."""
    statuses = parse_statuses(status_filter)
    booking_kind = parse_kind(kind) if kind else None
    with engine.connect() as conn:
        bookings = list_user_bookings(
            conn,
            user_id,
            role=role,
            statuses=statuses,
            kind=booking_kind,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
    return BookingListResponse(
        bookings=[BookingResponse.from_record(b) for b in bookings],
        page=page,
        page_size=page_size,
    )
