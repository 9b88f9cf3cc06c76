from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from booking_engine.domain.records import DateBlockRecord
from booking_engine.domain.types import BookingKind, HeldRange
from booking_engine.models.blocks import DateBlock


def get_blocks(
    conn: Connection,
    property_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[DateBlockRecord]:
    """
    Fetch a property's date blocks, optionally only those touching ``[start, end)``.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.
        start (date | None): Window start (inclusive).
        end (date | None): Window end (exclusive).

    Returns:
        list[DateBlockRecord]: Blocks ordered by start date.
    """
    query = select(DateBlock.__table__).where(DateBlock.property_id == property_id)
    if start is not None:
        query = query.where(DateBlock.end_date > start)
    if end is not None:
        query = query.where(DateBlock.start_date < end)
    query = query.order_by(DateBlock.start_date)
    return [DateBlockRecord.from_row(row) for row in conn.execute(query)]


def get_block(conn: Connection, block_id: str) -> Optional[DateBlockRecord]:
    row = conn.execute(select(DateBlock.__table__).where(DateBlock.id == block_id)).fetchone()
    return DateBlockRecord.from_row(row) if row else None


def get_blocks_as_holds(conn: Connection, property_id: str) -> list[HeldRange]:
    """Present owner blocks to the conflict detector as nightly holds."""
    return [
        HeldRange(booking_id=None, kind=BookingKind.SHORTLET, range=block.range, is_block=True)
        for block in get_blocks(conn, property_id)
    ]
