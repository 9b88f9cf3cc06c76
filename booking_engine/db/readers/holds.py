from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.types import BookingKind, BookingRange, HeldRange
from booking_engine.models.holds import Hold
from booking_engine.utils.datetime import ensure_utc


def get_active_holds(conn: Connection, property_id: str) -> list[HeldRange]:
    """
    Fetch every active hold on a property, ordered by start.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property whose calendar is being checked.

    Returns:
        list[HeldRange]: Holds of pending and confirmed bookings.
    """
    result = conn.execute(
        select(Hold.booking_id, Hold.kind, Hold.start_at, Hold.end_at)
        .where(Hold.property_id == property_id)
        .order_by(Hold.start_at, Hold.booking_id)
    )
    return [
        HeldRange(
            booking_id=row.booking_id,
            kind=BookingKind(row.kind),
            range=BookingRange(start=ensure_utc(row.start_at), end=ensure_utc(row.end_at)),
        )
        for row in result
    ]


def hold_exists(conn: Connection, booking_id: str) -> bool:
    result = conn.execute(select(Hold.booking_id).where(Hold.booking_id == booking_id))
    return result.fetchone() is not None
