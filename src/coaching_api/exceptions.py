"""FastAPI exception handlers for converting BookingError to HTTP responses.

This module provides exception handlers that convert core errors (BookingError
and its ValidationError, CapacityError, OverRefundError and EligibilityError
subclasses) to HTTP responses with a consistent ToolError JSON body.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: The request can never succeed as asked (started session, wrong age)
- 409 Conflict: The entity's current state refuses the change (status, capacity, balance)
- 422 Unprocessable Entity: Malformed values

Usage:
    from coaching_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from coaching_core.models.errors import BookingError, ErrorCode
from coaching_core.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_FAILED: HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_STATUS: HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_USAGE: HTTP_409_CONFLICT,
    ErrorCode.SESSION_STARTED: HTTP_400_BAD_REQUEST,
    ErrorCode.CAPACITY_EXCEEDED: HTTP_409_CONFLICT,
    ErrorCode.OVER_REFUND: HTTP_409_CONFLICT,
    ErrorCode.NOT_ELIGIBLE: HTTP_400_BAD_REQUEST,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode.

    Args:
        code: The ErrorCode to map

    Returns:
        HTTP status code, defaults to 400 if not explicitly mapped.
    """
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Handle BookingError exceptions and convert to JSON response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The BookingError exception

    Returns:
        JSONResponse with error details and appropriate status code.
    """
    status_code = get_http_status_for_error(exc.code)
    tool_error = exc.to_tool_error()

    return JSONResponse(
        status_code=status_code,
        content=tool_error.model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic error response.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The uncaught exception

    Returns:
        JSONResponse with 500 status and generic error message.
    """
    logger.exception("Unhandled exception: %s", exc)

    # Don't expose internal details
    error_response = {
        "success": False,
        "error_code": "ERR_INTERNAL",
        "message": "An unexpected error occurred",
        "recovery": "Please try again later or contact support",
        "details": None,
    }

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
