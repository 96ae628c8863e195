"""Booking cancellation endpoint."""

from fastapi import APIRouter, Depends

from coaching_api.dependencies import get_cancellation_service
from coaching_api.models.bookings import BookingCancelRequest
from coaching_core.models import CancellationResult
from coaching_core.services import CancellationService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "/cancel",
    summary="Cancel a booking",
    description="""
Cancel a booking and work out its refund under a policy.

**Notes:**
- Unpaid bookings cancel with no refund
- The refund never exceeds what has not already been refunded
- `refund_status` is `pending` when money has to be sent back

**Errors:**
- 400 ERR_SESSION_STARTED when the session is in the past
- 409 ERR_INVALID_STATUS when the booking is already cancelled
""",
    response_model=CancellationResult,
)
async def cancel_booking(
    request: BookingCancelRequest,
    service: CancellationService = Depends(get_cancellation_service),
) -> CancellationResult:
    """Cancel a booking and return its next state."""
    return service.cancel(
        request.booking,
        request.session,
        request.policy,
        request.resolved_now(),
        reason=request.reason,
    )
