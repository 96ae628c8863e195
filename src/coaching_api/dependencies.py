"""FastAPI dependency injection providers for core services.

The core services hold no state, so one cached instance of each serves every
request.

Usage in routes:
    from coaching_api.dependencies import get_discount_service

    @router.post("/discounts/calculate")
    async def calculate(
        request: DiscountCalculateRequest,
        service: DiscountService = Depends(get_discount_service),
    ):
        ...

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from coaching_core.services import (
    BlockBookingLedger,
    CancellationService,
    DiscountService,
    RefundPolicyService,
    TransferService,
)


@lru_cache
def get_refund_policy_service() -> RefundPolicyService:
    """Get cached RefundPolicyService instance."""
    return RefundPolicyService()


@lru_cache
def get_discount_service() -> DiscountService:
    """Get cached DiscountService instance."""
    return DiscountService()


@lru_cache
def get_block_booking_ledger() -> BlockBookingLedger:
    """Get cached BlockBookingLedger instance.

    Returns:
        BlockBookingLedger using the configured expiring-soon window.
    """
    return BlockBookingLedger()


@lru_cache
def get_transfer_service() -> TransferService:
    """Get cached TransferService instance."""
    return TransferService()


@lru_cache
def get_cancellation_service() -> CancellationService:
    """Get cached CancellationService instance.

    Returns:
        CancellationService sharing the cached RefundPolicyService.
    """
    return CancellationService(refund_policy=get_refund_policy_service())


def reset_services() -> None:
    """Clear all cached service instances (for tests)."""
    get_refund_policy_service.cache_clear()
    get_discount_service.cache_clear()
    get_block_booking_ledger.cache_clear()
    get_transfer_service.cache_clear()
    get_cancellation_service.cache_clear()
