from datetime import datetime
from typing import Optional

from sqlalchemy import Select, select
from sqlalchemy.engine import Connection

from booking_engine.domain.records import BookingRecord
from booking_engine.domain.types import BookingKind, BookingStatus, PaymentStatus
from booking_engine.models.bookings import Booking

# Paid bookings wait for the owner instead of being reaped
PAID_STATUSES = (PaymentStatus.COMPLETED.value, PaymentStatus.PARTIAL.value)


def get_booking(
    conn: Connection, booking_id: str, for_update: bool = False
) -> Optional[BookingRecord]:
    """
    Fetch a single booking.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (str): Booking ID.
        for_update (bool): Lock the row until the transaction ends (PostgreSQL).

    Returns:
        Optional[BookingRecord]: The booking, or None if it does not exist.
    """
    query = select(Booking.__table__).where(Booking.id == booking_id)
    if for_update and conn.dialect.name == "postgresql":
        query = query.with_for_update()

    row = conn.execute(query).fetchone()
    return BookingRecord.from_row(row) if row else None


def get_property_id(conn: Connection, booking_id: str) -> Optional[str]:
    """Return the property a booking belongs to without loading the whole row."""
    result = conn.execute(select(Booking.property_id).where(Booking.id == booking_id))
    row = result.fetchone()
    return row[0] if row else None


def _filtered(
    query: Select,
    statuses: Optional[list[BookingStatus]],
    kind: Optional[BookingKind],
    limit: Optional[int],
    offset: int,
) -> Select:
    if statuses:
        query = query.where(Booking.status.in_([s.value for s in statuses]))
    if kind is not None:
        query = query.where(Booking.kind == kind.value)
    query = query.order_by(Booking.start_at, Booking.created_at)
    if limit is not None:
        query = query.limit(limit).offset(offset)
    return query


def list_property_bookings(
    conn: Connection,
    property_id: str,
    statuses: Optional[list[BookingStatus]] = None,
    kind: Optional[BookingKind] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> list[BookingRecord]:
    """
    List a property's bookings, oldest range first.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        property_id (str): Property ID.
        statuses (list[BookingStatus] | None): Only these statuses, if given.
        kind (BookingKind | None): Only this kind, if given.
        limit (int | None): Page size, all rows when None.
        offset (int): Rows to skip.

    Returns:
        list[BookingRecord]: Matching bookings.
    """
    query = select(Booking.__table__).where(Booking.property_id == property_id)
    query = _filtered(query, statuses, kind, limit, offset)
    return [BookingRecord.from_row(row) for row in conn.execute(query)]


def list_user_bookings(
    conn: Connection,
    user_id: str,
    role: str = "requester",
    statuses: Optional[list[BookingStatus]] = None,
    kind: Optional[BookingKind] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> list[BookingRecord]:
    """
    List bookings a user requested, or bookings on properties they own.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        user_id (str): Requester or owner ID.
        role (str): ``"requester"`` or ``"owner"``.
        statuses (list[BookingStatus] | None): Only these statuses, if given.
        kind (BookingKind | None): Only this kind, if given.
        limit (int | None): Page size, all rows when None.
        offset (int): Rows to skip.

    Returns:
        list[BookingRecord]: Matching bookings.
    """
    column = Booking.owner_id if role == "owner" else Booking.requester_id
    query = select(Booking.__table__).where(column == user_id)
    query = _filtered(query, statuses, kind, limit, offset)
    return [BookingRecord.from_row(row) for row in conn.execute(query)]

def list_expired_pending(
    conn: Connection, now: datetime, limit: int
) -> list[tuple[str, str]]:
    """
    Find pending, unpaid bookings whose hold deadline has passed.

    Args:
        conn (Connection): SQLAlchemy DB connection.
        now (datetime): Reference time.
        limit (int): Maximum rows to return.

    Returns:
        list[tuple[str, str]]: ``(booking_id, property_id)`` pairs, oldest deadline first.
    """
    result = conn.execute(
        select(Booking.id, Booking.property_id)
        .where(
            Booking.status == BookingStatus.PENDING.value,
            Booking.hold_expires_at <= now,
            Booking.payment_status.not_in(PAID_STATUSES),
        )
        .order_by(Booking.hold_expires_at)
        .limit(limit)
    )
    return [(row.id, row.property_id) for row in result]
