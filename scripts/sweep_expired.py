import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from booking_engine.db.engine import engine
from booking_engine.logging_config import setup_logging
from booking_engine.services.expiry import sweep_expired_bookings

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Run one expiry sweep and exit. For cron-driven deployments.
    """
    parser = argparse.ArgumentParser(description="Expire stale pending bookings")
    parser.add_argument("--batch-size", type=int, default=None, help="Bookings per sweep")
    args = parser.parse_args()

    try:
        if args.batch_size is not None:
            expired = sweep_expired_bookings(engine, batch_size=args.batch_size)
        else:
            expired = sweep_expired_bookings(engine)
        logger.info("sweep_script_completed", expired=len(expired))
    except Exception:
        logger.exception("sweep_script_failed")
        raise


if __name__ == "__main__":
    main()
