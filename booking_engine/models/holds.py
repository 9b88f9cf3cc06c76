# models/holds.py

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.sql import func

from booking_engine.models.base import Base


class Hold(Base):
    """
    ORM model for an active hold on a property's calendar.

    A row exists exactly while its booking is pending or confirmed. The row is
    deleted when the booking reaches a terminal status; the booking row stays.
    """

    __tablename__ = "holds"

    booking_id = Column(
        String(36), ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True
    )
    property_id = Column(String(64), nullable=False, index=True)
    kind = Column(String(20), nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
