"""
Structured Logging Configuration

structlog with a colored console renderer in development and JSON
everywhere else. Long-running jobs bind their identifiers (e.g. the
ingestion generation) with `job_context` so every event they emit
carries them.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.types import Processor

from ..config import get_settings

# Per-request chatter from these libraries drowns the ingestion logs
_NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler.executors.default")


def setup_logging(log_level: Optional[str] = None):
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()

    if log_level is None:
        log_level = "DEBUG" if settings.debug else "INFO"
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def job_context(**values) -> Iterator[None]:
    """Bind `values` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str = "release_calendar") -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
