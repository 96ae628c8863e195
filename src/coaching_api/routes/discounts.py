"""Discount calculation endpoint."""

from fastapi import APIRouter, Depends

from coaching_api.dependencies import get_discount_service
from coaching_api.models.discounts import DiscountCalculateRequest
from coaching_core.models import DiscountResult
from coaching_core.services import DiscountService

router = APIRouter(tags=["discounts"])


@router.post(
    "/discounts/calculate",
    summary="Calculate cart discounts",
    description="""
Apply discount rules to a booking cart.

Active rules are applied in ascending priority order. Percentages come off
the price left by earlier rules; no item ever drops below zero.

**Rule types:**
- sibling: second and later children of the same parent
- bulk: every item once the cart holds `min_quantity` items
- early_bird: items whose session is at least `days_before_session` days away
""",
    response_model=DiscountResult,
)
async def calculate_discounts(
    request: DiscountCalculateRequest,
    service: DiscountService = Depends(get_discount_service),
) -> DiscountResult:
    """Calculate discounts for a cart."""
    return service.apply(request.items, request.rules, request.resolved_now())
