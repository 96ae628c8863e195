"""Pydantic models for the coaching booking financial core."""

from .block_booking import (
    BlockBooking,
    BlockBookingCreate,
    BlockBookingSummary,
    DeductSessionInput,
    RefundRecord,
    RefundSessionsInput,
    UsageRecord,
)
from .booking import Booking, Session
from .discount import (
    AppliedDiscount,
    DiscountCartItem,
    DiscountConditions,
    DiscountedItem,
    DiscountResult,
    DiscountRule,
    DiscountValue,
    RuleSavings,
)
from .enums import (
    BlockBookingStatus,
    BookingStatus,
    DiscountKind,
    DiscountScope,
    DiscountType,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
    TransferAction,
)
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    BookingError,
    CapacityError,
    EligibilityError,
    ErrorCode,
    OverRefundError,
    ToolError,
    ValidationError,
)
from .refund_policy import (
    CancellationResult,
    RefundEvaluation,
    RefundPolicy,
    RefundRule,
    RefundScheduleEntry,
)
from .transfer import TransferOption, TransferResult

__all__ = [
    # Enums
    "BlockBookingStatus",
    "BookingStatus",
    "DiscountKind",
    "DiscountScope",
    "DiscountType",
    "PaymentMethod",
    "PaymentStatus",
    "RefundStatus",
    "TransferAction",
    # Booking
    "Booking",
    "Session",
    # Refund policy
    "CancellationResult",
    "RefundEvaluation",
    "RefundPolicy",
    "RefundRule",
    "RefundScheduleEntry",
    # Discounts
    "AppliedDiscount",
    "DiscountCartItem",
    "DiscountConditions",
    "DiscountedItem",
    "DiscountResult",
    "DiscountRule",
    "DiscountValue",
    "RuleSavings",
    # Block bookings
    "BlockBooking",
    "BlockBookingCreate",
    "BlockBookingSummary",
    "DeductSessionInput",
    "RefundRecord",
    "RefundSessionsInput",
    "UsageRecord",
    # Transfers
    "TransferOption",
    "TransferResult",
    # Errors
    "BookingError",
    "CapacityError",
    "EligibilityError",
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "OverRefundError",
    "ToolError",
    "ValidationError",
]
