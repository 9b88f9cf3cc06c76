from sqlalchemy import insert
from sqlalchemy.engine import Connection

from booking_engine.domain.records import BookingStateChanged
from booking_engine.models.events import BookingEvent


def record_event(conn: Connection, change: BookingStateChanged) -> None:
    """
    Append a state change to the booking event log.

    Must run in the same transaction as the status write it describes.
    """
    conn.execute(
        insert(BookingEvent).values(
            booking_id=change.booking_id,
            property_id=change.property_id,
            from_status=change.from_status.value if change.from_status else None,
            to_status=change.to_status.value,
            event=change.event.value if change.event else None,
            actor_id=change.actor_id,
            payload=change.to_payload(),
            created_at=change.timestamp,
        )
    )
