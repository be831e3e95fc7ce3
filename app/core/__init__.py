"""Core infrastructure modules."""

from .security import get_current_user, get_current_user_optional
from .exceptions import (
    ReleaseCalendarException,
    NotFoundError,
    ValidationError,
    UnauthorizedError,
    UpstreamError,
    StoreError,
)
from .logging import setup_logging, get_logger, job_context

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "ReleaseCalendarException",
    "NotFoundError",
    "ValidationError",
    "UnauthorizedError",
    "UpstreamError",
    "StoreError",
    "setup_logging",
    "get_logger",
    "job_context",
]
