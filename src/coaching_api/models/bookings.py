"""API models for booking cancellation."""

from pydantic import Field

from coaching_core.models import Booking, RefundPolicy, Session

from .common import ClockedRequest


class BookingCancelRequest(ClockedRequest):
    """Cancel a booking under a refund policy."""

    booking: Booking
    session: Session
    policy: RefundPolicy | None = Field(
        default=None,
        description="Policy to apply; the default policy is used when omitted",
    )
    reason: str | None = Field(default=None, max_length=500)
