"""API routes package.

Routers are organized by domain:

- refunds: Refund evaluation, schedules and policy validation
- discounts: Cart discount calculation
- block_bookings: Prepaid session packages
- transfers: Moving bookings between sessions
- bookings: Booking cancellation

All routers are registered in main.py with /api prefix.
"""

from coaching_api.routes.block_bookings import router as block_bookings_router
from coaching_api.routes.bookings import router as bookings_router
from coaching_api.routes.discounts import router as discounts_router
from coaching_api.routes.refunds import router as refunds_router
from coaching_api.routes.transfers import router as transfers_router

__all__ = [
    "block_bookings_router",
    "bookings_router",
    "discounts_router",
    "refunds_router",
    "transfers_router",
]
