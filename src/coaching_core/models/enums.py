"""Enumeration types for coaching booking data models."""

from enum import Enum


class BookingStatus(str, Enum):
    """Status of a session booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    WAITLIST = "waitlist"


class PaymentStatus(str, Enum):
    """Payment status for a booking."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class BlockBookingStatus(str, Enum):
    """Lifecycle status of a prepaid session package."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Refunded and cancelled packages accept no further transitions."""
        return self in (BlockBookingStatus.REFUNDED, BlockBookingStatus.CANCELLED)


class PaymentMethod(str, Enum):
    """How a block booking was paid for."""

    CARD = "card"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    PAYMENT_LINK = "payment_link"


class DiscountType(str, Enum):
    """Kinds of discount rule staff can configure."""

    SIBLING = "sibling"
    BULK = "bulk"
    EARLY_BIRD = "early_bird"


class DiscountKind(str, Enum):
    """Whether a discount value is a percentage or an amount in pence."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountScope(str, Enum):
    """Which qualifying items a discount reaches."""

    TOTAL = "total"
    ADDITIONAL = "additional"


class TransferAction(str, Enum):
    """Outcome of reconciling a session transfer."""

    CHECKOUT_REQUIRED = "checkout_required"
    REFUND_AND_TRANSFER = "refund_and_transfer"
    TRANSFER_ONLY = "transfer_only"


class RefundStatus(str, Enum):
    """State of the money movement a cancellation asks for."""

    PENDING = "pending"
    NONE = "none"
