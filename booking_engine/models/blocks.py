# models/blocks.py

import uuid

from sqlalchemy import Column, Date, DateTime, String, Text
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class DateBlock(Base):
    """
    ORM model for dates an owner or admin took off the calendar.

    ``[start_date, end_date)`` is half-open, like a stay. Blocks stop stays
    from being booked but never inspections.
    """

    __tablename__ = "date_blocks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(64), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(20), nullable=False)  # maintenance, owner_blocked, ...
    notes = Column(Text, nullable=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
