"""
Global Exception Handlers

Custom exceptions and FastAPI exception handlers.
"""

from fastapi import Request
from fastapi.responses import JSONResponse


class ReleaseCalendarException(Exception):
    """Base exception for release calendar errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ReleaseCalendarException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            status_code=404
        )


class ValidationError(ReleaseCalendarException):
    """Request parameters missing or malformed."""

    def __init__(self, message: str):
        super().__init__(message=message, status_code=400)


class UnauthorizedError(ReleaseCalendarException):
    """Authentication/authorization failed."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, status_code=401)


class UpstreamError(ReleaseCalendarException):
    """Catalog API request failed."""

    def __init__(self, api_name: str, detail: str):
        self.api_name = api_name
        super().__init__(
            message=f"{api_name} request failed: {detail}",
            status_code=502
        )


class StoreError(ReleaseCalendarException):
    """Backing store read or write failed."""

    def __init__(self, table: str, detail: str):
        self.table = table
        super().__init__(
            message=f"Store operation on '{table}' failed: {detail}",
            status_code=500
        )


async def release_calendar_exception_handler(
    request: Request,
    exc: ReleaseCalendarException
) -> JSONResponse:
    """Handle ReleaseCalendarException and return JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.message,
            "status_code": exc.status_code,
        }
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ReleaseCalendarException, release_calendar_exception_handler)
