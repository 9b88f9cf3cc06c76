# models/bookings.py

import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class Booking(Base):
    """
    ORM model for a booking request against a property.

    Rows are never deleted: terminal bookings stay for audit and statistics.
    ``start_at``/``end_at`` hold the normalized half-open range in UTC (stays at
    midnight boundaries, inspections as start instant plus fixed duration).
    ``version`` is bumped on every status write and guards concurrent updates.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_property_status", "property_id", "status"),
        Index("ix_bookings_status_hold_expires", "status", "hold_expires_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(64), nullable=False)
    requester_id = Column(String(64), nullable=False, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    kind = Column(String(20), nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, server_default="pending")
    payment_status = Column(String(20), nullable=False, server_default="pending")
    hold_expires_at = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False, server_default="1")
    cancelled_by = Column(String(64), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    owner_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
