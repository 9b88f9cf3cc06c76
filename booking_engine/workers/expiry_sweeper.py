"""
Background thread running the expiry sweep on a fixed interval.

The sweep itself lives in ``services.expiry``; this module only schedules it.
A failing sweep is logged and retried on the next tick, it never stops the
loop.
"""

from __future__ import annotations

import threading
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from booking_engine.config import SWEEP_BATCH_SIZE, SWEEP_INTERVAL_SECONDS
from booking_engine.metrics import expiry_sweeps_total
from booking_engine.services.expiry import sweep_expired_bookings

logger = structlog.get_logger(__name__)


class ExpirySweeper:
    """
    Periodic runner for ``sweep_expired_bookings``.

    Attributes:
        engine: SQLAlchemy Engine the sweep runs against
        interval_seconds: Pause between sweeps
        batch_size: Bookings examined per sweep

    Example:
        >>> sweeper = ExpirySweeper(engine, interval_seconds=60)
        >>> sweeper.start()
        >>> ...
        >>> sweeper.stop()
    """

    def __init__(
        self,
        engine: Engine,
        interval_seconds: float = SWEEP_INTERVAL_SECONDS,
        batch_size: int = SWEEP_BATCH_SIZE,
    ) -> None:
        self.engine = engine
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[str]:
        """
        Run a single sweep, recording its outcome.

        Returns:
            list[str]: IDs of expired bookings (empty if the sweep failed)
        """
        try:
            expired = sweep_expired_bookings(self.engine, batch_size=self.batch_size)
        except Exception as e:
            expiry_sweeps_total.labels(status="failure").inc()
            logger.exception("expiry_sweep_failed", error=str(e))
            return []

        expiry_sweeps_total.labels(status="success").inc()
        return expired

    def _loop(self) -> None:
        logger.info("expiry_sweeper_started", interval_seconds=self.interval_seconds)
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval_seconds)
        logger.info("expiry_sweeper_stopped")

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="expiry-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
