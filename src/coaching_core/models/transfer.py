"""Session transfer models."""

import datetime as dt

from pydantic import BaseModel, Field

from .booking import Booking
from .enums import TransferAction


class TransferResult(BaseModel):
    """Monetary consequence of moving a booking to another session.

    ``booking`` is the next state to persist. For ``checkout_required`` it is
    the unchanged booking: the session is only rewritten once the difference
    has been paid.
    """

    action: TransferAction
    price_difference: int = Field(..., description="Target price minus current price, pence")
    booking: Booking
    refund_amount: int = Field(default=0, ge=0, description="Pence to send back to the payer")
    refund_shortfall: int = Field(
        default=0, ge=0, description="Pence owed that exceeded the refundable balance"
    )


class TransferOption(BaseModel):
    """A session the booking could move to."""

    session_id: str
    name: str
    day_of_week: int
    start_time: str | None = None
    start_date: dt.datetime
    price: int
    spots_left: int
    price_difference: int
    age_min: int | None = None
    age_max: int | None = None
