"""
FastAPI dependency injection providers.

Route handlers receive the engine through ``Depends(get_db_engine)`` so tests
can swap in a throwaway database with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from booking_engine.db.engine import engine


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Example:
        >>> @router.post("/properties/{property_id}/bookings")
        >>> def create_booking(
        ...     property_id: str,
        ...     payload: ReservationCreatePayload,
        ...     engine: Engine = Depends(get_db_engine),
        ... ):
        ...     return reserve(engine, property_id, ...)
    """
    yield engine
