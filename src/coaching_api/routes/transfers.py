"""Session transfer endpoints.

Provides REST endpoints for:
- Reconciling the price of a transfer
- Completing a transfer once an upgrade has been paid
- Listing the sessions a booking could move to
"""

from fastapi import APIRouter, Depends

from coaching_api.dependencies import get_transfer_service
from coaching_api.models.transfers import (
    TransferOptionsRequest,
    TransferOptionsResponse,
    TransferRequest,
)
from coaching_core.models import Booking, TransferResult
from coaching_core.services import TransferService

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.post(
    "/reconcile",
    summary="Reconcile a session transfer",
    description="""
Work out what moving a booking to another session costs.

**Actions:**
- checkout_required: the new session costs more; collect `price_difference`
  and call `/transfers/checkout`. The booking is returned unchanged.
- refund_and_transfer: the new session costs less; the booking moves and
  `refund_amount` is owed back (capped at what is still refundable).
- transfer_only: same price; the booking moves.

**Errors:**
- 409 ERR_CAPACITY when the target session is full or closed
- 400 ERR_NOT_ELIGIBLE when the child is outside the target's age range
""",
    response_model=TransferResult,
)
async def reconcile_transfer(
    request: TransferRequest,
    service: TransferService = Depends(get_transfer_service),
) -> TransferResult:
    """Reconcile a transfer and return the next booking state."""
    return service.reconcile(
        request.current_session,
        request.target_session,
        request.booking,
        now=request.resolved_now(),
        child_age=request.child_age,
    )


@router.post(
    "/checkout",
    summary="Complete a paid upgrade",
    response_model=Booking,
    responses={422: {"description": "The target session does not cost more"}},
)
async def complete_transfer_checkout(
    request: TransferRequest,
    service: TransferService = Depends(get_transfer_service),
) -> Booking:
    """Move the booking after the price difference has been collected."""
    return service.complete_checkout(
        request.booking,
        request.current_session,
        request.target_session,
        now=request.resolved_now(),
        child_age=request.child_age,
    )


@router.post(
    "/options",
    summary="List transfer options",
    response_model=TransferOptionsResponse,
)
async def list_transfer_options(
    request: TransferOptionsRequest,
    service: TransferService = Depends(get_transfer_service),
) -> TransferOptionsResponse:
    """Future, open, age-appropriate sessions of the same service type."""
    options = service.list_transfer_options(
        request.current_session,
        request.candidates,
        request.resolved_now(),
        child_age=request.child_age,
    )
    return TransferOptionsResponse(options=options)
