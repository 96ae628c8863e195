"""Block booking endpoints.

Provides REST endpoints for:
- Recording a purchased package
- Deducting an attended session
- Refunding unused sessions
- Admin cancellation and expiry
- Summary read model with the effective status

Each endpoint takes the package's current state and returns the next one;
persisting it is up to the caller.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from coaching_api.dependencies import get_block_booking_ledger
from coaching_api.models.block_bookings import (
    BlockBookingDeductRequest,
    BlockBookingPurchaseRequest,
    BlockBookingRefundRequest,
    BlockBookingStateRequest,
)
from coaching_core.models import BlockBooking, BlockBookingSummary
from coaching_core.services import BlockBookingLedger, LedgerRefundResult

router = APIRouter(prefix="/block-bookings", tags=["block-bookings"])


@router.post(
    "",
    summary="Record a package purchase",
    status_code=HTTP_201_CREATED,
    response_model=BlockBooking,
    responses={422: {"description": "Invalid session count, amount or expiry"}},
)
async def purchase_block_booking(
    request: BlockBookingPurchaseRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> BlockBooking:
    """Create the initial state of a package.

    The price per session defaults to total paid divided by sessions.
    """
    return ledger.purchase(request.block_booking, request.resolved_now())


@router.post(
    "/deduct",
    summary="Deduct an attended session",
    response_model=BlockBooking,
    responses={
        409: {"description": "Package not active, no sessions left, or date already deducted"},
    },
)
async def deduct_session(
    request: BlockBookingDeductRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> BlockBooking:
    """Deduct one session; the package becomes exhausted at zero."""
    return ledger.deduct(request.block_booking, request.usage, request.resolved_now())


@router.post(
    "/refund",
    summary="Refund unused sessions",
    description="""
Refund unused sessions from a package.

Send `sessions_to_refund`, `refund_amount`, or both. A missing session
count is derived from the amount, rounded up to whole sessions. Sending
neither refunds everything that is left.

**Errors:**
- 409 ERR_OVER_REFUND with `max_refundable` and `max_sessions` details
- 409 ERR_INVALID_STATUS for refunded or cancelled packages
""",
    response_model=LedgerRefundResult,
)
async def refund_sessions(
    request: BlockBookingRefundRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> LedgerRefundResult:
    """Refund sessions and return the refund record to pay out."""
    return ledger.refund(request.block_booking, request.refund, request.resolved_now())


@router.post(
    "/cancel",
    summary="Cancel a package",
    response_model=BlockBooking,
    responses={409: {"description": "Package already refunded or cancelled"}},
)
async def cancel_block_booking(
    request: BlockBookingStateRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> BlockBooking:
    """Admin override; counters and history are kept."""
    return ledger.cancel(request.block_booking, request.resolved_now())


@router.post(
    "/expire",
    summary="Mark a lapsed package as expired",
    response_model=BlockBooking,
)
async def expire_block_booking(
    request: BlockBookingStateRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> BlockBooking:
    """Store the expired status once a package with sessions left has lapsed.

    Packages that have not lapsed are returned unchanged.
    """
    return ledger.expire(request.block_booking, request.resolved_now())


@router.post(
    "/summary",
    summary="Summarise a package",
    response_model=BlockBookingSummary,
)
async def summarize_block_booking(
    request: BlockBookingStateRequest,
    ledger: BlockBookingLedger = Depends(get_block_booking_ledger),
) -> BlockBookingSummary:
    return ledger.summarize(request.block_booking, request.resolved_now())
