"""
structlog setup for the API process, the expiry sweeper thread and scripts.

Every log line is an event name plus key/value fields (``booking_reserved``,
``booking_transitioned``, ``expiry_sweep_completed``...). Fields bound with
``structlog.contextvars`` (the request ID) are merged into each line.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping, cast

import structlog

from booking_engine.config import LOG_FORMAT, LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

# Libraries whose INFO output drowns out booking events
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "alembic", "uvicorn.access")


def _renderer(log_format: str) -> Processor:
    if log_format == "console":
        return cast(Processor, structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return cast(Processor, structlog.processors.JSONRenderer(sort_keys=True))


def setup_logging(log_level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> None:
    """
    Configure stdlib logging and structlog for the whole process.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        log_format: ``json`` for log aggregation, ``console`` for local runs
    """
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=log_level,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if log_format != "console":
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(log_format))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
