from typing import Any

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.models.events import BookingEvent


def list_booking_events(conn: Connection, booking_id: str) -> list[dict[str, Any]]:
    """
    Return a booking's state-change history, oldest first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        booking_id (str): Booking ID.

    Returns:
        list[dict]: Stored event payloads.
    """
    result = conn.execute(
        select(BookingEvent.payload)
        .where(BookingEvent.booking_id == booking_id)
        .order_by(BookingEvent.id)
    )
    return [dict(row.payload) for row in result]
