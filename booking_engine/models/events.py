# models/events.py

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class BookingEvent(Base):
    """
    ORM model for the booking state-change log.

    Written in the same transaction as the status change it records, so the
    log and the bookings table never disagree. ``from_status`` is NULL for the
    creation entry.
    """

    __tablename__ = "booking_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(String(36), nullable=False, index=True)
    property_id = Column(String(64), nullable=False)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=False)
    event = Column(String(20), nullable=True)
    actor_id = Column(String(64), nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
