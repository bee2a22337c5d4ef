"""
structlog configuration shared by the API process, Celery workers and scripts.

Usage:
    from policyhub.core.logging import get_logger, setup_logging

    setup_logging("INFO")          # once per process
    logger = get_logger(__name__)
    logger.info("Row processed", row=3, policy_number="POL-1")
"""

from __future__ import annotations

import logging
import sys

import structlog

from policyhub.core.config import settings


def setup_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for the current process."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    if settings.APP_ENV == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to `name`."""
    return structlog.get_logger(name)
