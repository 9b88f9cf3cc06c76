import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import structlog

from booking_engine.db.engine import engine, init_db
from booking_engine.logging_config import setup_logging

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Create the booking tables directly, for local runs without Alembic.
    """
    init_db(engine)
    logger.info("tables_created", url=str(engine.url.render_as_string(hide_password=True)))


if __name__ == "__main__":
    main()
