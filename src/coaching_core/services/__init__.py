"""Core services for the coaching booking financial lifecycle."""

from .block_booking_ledger import BlockBookingLedger, LedgerRefundResult
from .cancellation_service import CancellationService
from .discount_service import DiscountService, describe_rule
from .refund_policy_service import (
    DEFAULT_REFUND_POLICY,
    RefundPolicyService,
    get_default_policy,
)
from .transfer_service import TransferService

__all__ = [
    "BlockBookingLedger",
    "CancellationService",
    "DEFAULT_REFUND_POLICY",
    "DiscountService",
    "LedgerRefundResult",
    "RefundPolicyService",
    "TransferService",
    "describe_rule",
    "get_default_policy",
]
