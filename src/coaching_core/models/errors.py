"""Standard error codes and exceptions for the booking financial core.

Every failure raised by the core is a BookingError subclass carrying one of
the codes below. Callers translate them into transport responses; the core
never retries, so the same input always yields the same error.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes for core operations."""

    VALIDATION_FAILED = "ERR_VALIDATION"
    INVALID_STATUS = "ERR_INVALID_STATUS"
    DUPLICATE_USAGE = "ERR_DUPLICATE_USAGE"
    SESSION_STARTED = "ERR_SESSION_STARTED"
    CAPACITY_EXCEEDED = "ERR_CAPACITY"
    OVER_REFUND = "ERR_OVER_REFUND"
    NOT_ELIGIBLE = "ERR_NOT_ELIGIBLE"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "The request contains invalid values",
    ErrorCode.INVALID_STATUS: "This operation is not allowed in the current status",
    ErrorCode.DUPLICATE_USAGE: "A session has already been deducted for this date",
    ErrorCode.SESSION_STARTED: "The session has already started and cannot be cancelled",
    ErrorCode.CAPACITY_EXCEEDED: "The operation would exceed the available capacity",
    ErrorCode.OVER_REFUND: "The requested refund exceeds the refundable balance",
    ErrorCode.NOT_ELIGIBLE: "The selected session is not suitable for this child",
}

# Recovery suggestions for callers
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Correct the highlighted values and resubmit",
    ErrorCode.INVALID_STATUS: "Reload the record and check its status before retrying",
    ErrorCode.DUPLICATE_USAGE: "Check the usage history; pick a different session date",
    ErrorCode.SESSION_STARTED: "Contact staff to discuss options for past sessions",
    ErrorCode.CAPACITY_EXCEEDED: "Choose another session or purchase more sessions",
    ErrorCode.OVER_REFUND: "Reduce the refund to the maximum refundable amount",
    ErrorCode.NOT_ELIGIBLE: "Choose a session that matches the child's age group",
}


class ToolError(BaseModel):
    """Standard error response format for failed core operations."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
        message: Optional[str] = None,
    ) -> "ToolError":
        """Create a ToolError from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error
            message: Optional message replacing the default one for the code

        Returns:
            A ToolError with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=message or ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class BookingError(Exception):
    """Base exception raised by core operations.

    Can be caught and converted to a ToolError for API responses.
    """

    default_code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code or self.default_code
        self.message = message or ERROR_MESSAGES[self.code]
        self.recovery = ERROR_RECOVERY[self.code]
        self.details = details
        super().__init__(self.message)

    def to_tool_error(self) -> ToolError:
        """Convert this exception to a ToolError for responses."""
        return ToolError.from_code(self.code, self.details, self.message)


class ValidationError(BookingError):
    """Malformed input or an operation not allowed in the current state."""

    default_code = ErrorCode.VALIDATION_FAILED


class CapacityError(BookingError):
    """The operation would break a balance or capacity invariant."""

    default_code = ErrorCode.CAPACITY_EXCEEDED


class OverRefundError(BookingError):
    """A refund request exceeds what is left to refund.

    Carries the maximum refundable amount (and session count, for packages)
    so the caller can offer a corrected action.
    """

    default_code = ErrorCode.OVER_REFUND

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        max_refundable: int,
        max_sessions: Optional[int] = None,
    ):
        self.max_refundable = max_refundable
        self.max_sessions = max_sessions
        details = {"max_refundable": str(max_refundable)}
        if max_sessions is not None:
            details["max_sessions"] = str(max_sessions)
        super().__init__(message, details=details)


class EligibilityError(BookingError):
    """The target session is unsuitable for the child."""

    default_code = ErrorCode.NOT_ELIGIBLE
