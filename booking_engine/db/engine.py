"""
SQLAlchemy engine singleton with production-ready connection pooling.

PostgreSQL is the production backend. SQLite file URLs are accepted for local
runs and the test suite; they get a thread-shareable connection and no pool
sizing (the SQLite dialect manages its own pool).
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from booking_engine.config import DATABASE_URL
from booking_engine.models.base import Base

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def build_engine(url: str) -> Engine:
    """
    Create an engine for ``url`` with backend-appropriate pool settings.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    options: dict[str, Any] = {"future": True, "echo": False}

    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        options.update(
            pool_size=10,  # Number of connections to maintain in the pool
            max_overflow=20,  # Additional connections when pool is exhausted
            pool_pre_ping=True,  # Verify connections before using (detect stale connections)
            pool_recycle=3600,  # Recycle connections after 1 hour
        )

    return create_engine(url, **options)


engine: Engine = build_engine(DATABASE_URL)


def init_db(target: Engine | None = None) -> None:
    """
    Create all tables that do not exist yet.

    Production schemas are managed by Alembic; this is for local runs and tests.
    """
    import booking_engine.models.blocks  # noqa: F401
    import booking_engine.models.bookings  # noqa: F401
    import booking_engine.models.events  # noqa: F401
    import booking_engine.models.holds  # noqa: F401

    Base.metadata.create_all(target or engine)


def check_engine_health() -> bool:
    """
    Check if database engine is healthy and connections are working.

    Used by the /ready endpoint to verify database connectivity before
    allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
