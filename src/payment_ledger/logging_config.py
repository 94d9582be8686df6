"""
Structured logging configuration.

Every module logs through structlog with event names and key/value fields:

    log = get_logger(__name__)
    log.warning("operation.failed", operation="ReadPayment", payment_id="payment1")

configure_logging() is called once by the CLI gateway. Library use without
it falls back to structlog's defaults.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog for the process.

    Parameters
    ----------
    level : str
        Minimum level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Emit one JSON object per line instead of the console format.
    """
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a structlog logger, optionally bound to a module name.
    """
    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger"]
