"""API-specific request/response models.

Domain models (Booking, BlockBooking, RefundPolicy, etc.) are in
coaching_core.models and are reused here where appropriate.

Modules:
- common: Base request carrying the evaluation time
- refunds: Refund evaluation, schedule and policy validation
- discounts: Cart discount calculation
- block_bookings: Package purchase, deduction, refund and cancellation
- transfers: Session transfer and transfer options
- bookings: Booking cancellation
"""

__all__: list[str] = []
