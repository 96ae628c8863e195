"""API models for block booking endpoints."""

from pydantic import Field

from coaching_core.models import (
    BlockBooking,
    BlockBookingCreate,
    DeductSessionInput,
    RefundSessionsInput,
)

from .common import ClockedRequest


class BlockBookingPurchaseRequest(ClockedRequest):
    """Record a newly bought package."""

    block_booking: BlockBookingCreate


class BlockBookingStateRequest(ClockedRequest):
    """Any request that acts on an existing package."""

    block_booking: BlockBooking = Field(..., description="Current stored state")


class BlockBookingDeductRequest(BlockBookingStateRequest):
    """Take one attended session off a package."""

    usage: DeductSessionInput


class BlockBookingRefundRequest(BlockBookingStateRequest):
    """Refund unused sessions of a package."""

    refund: RefundSessionsInput = Field(default_factory=RefundSessionsInput)
