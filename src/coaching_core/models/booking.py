"""Booking and session models.

A Booking is one child's reservation for one Session. Sessions are owned by
the scheduling side of the business and are read-only here. Amounts are in
pence.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .enums import BookingStatus, PaymentStatus


class Session(BaseModel):
    """A bookable coaching time slot."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., description="Unique session ID")
    name: str = Field(default="", description="Display name")
    price: int = Field(..., ge=0, description="Price in pence")
    start_date: dt.datetime = Field(..., description="When the session (or term) starts")
    day_of_week: int = Field(default=0, ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str | None = Field(
        default=None, pattern=r"^\d{2}:\d{2}$", description="Start time, HH:MM"
    )
    capacity: int = Field(..., ge=0, description="Maximum number of children")
    enrolled: int = Field(default=0, ge=0, description="Children currently enrolled")
    age_min: int | None = Field(default=None, ge=0, description="Youngest eligible age")
    age_max: int | None = Field(default=None, ge=0, description="Oldest eligible age")
    is_force_closed: bool = Field(default=False, description="Closed by staff regardless of capacity")
    service_type: str | None = Field(default=None, description="Programme family, e.g. 'holiday-camp'")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def spots_left(self) -> int:
        return max(0, self.capacity - self.enrolled)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_full(self) -> bool:
        return self.spots_left == 0 or self.is_force_closed

    def accepts_age(self, age: int | None) -> bool:
        """Check a child's age against the session's age range.

        Unknown ages and open-ended ranges are accepted.
        """
        if age is None:
            return True
        if self.age_min is not None and age < self.age_min:
            return False
        if self.age_max is not None and age > self.age_max:
            return False
        return True


class Booking(BaseModel):
    """One child's reservation for one session.

    ``refunded_amount`` never exceeds ``amount``. Once cancelled, a booking
    is not mutated again.
    """

    model_config = ConfigDict(frozen=True)

    booking_id: str = Field(..., description="Unique booking ID")
    session_id: str = Field(..., description="Session currently booked")
    child_id: str = Field(..., description="Child the booking is for")
    parent_id: str | None = Field(default=None, description="Parent who paid")
    amount: int = Field(..., ge=0, description="Amount paid in pence")
    refunded_amount: int = Field(default=0, ge=0, description="Total refunded in pence")
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    status: BookingStatus = Field(default=BookingStatus.PENDING)
    transferred_from: str | None = Field(
        default=None, description="Session the booking was transferred out of"
    )
    transferred_at: dt.datetime | None = None
    cancelled_at: dt.datetime | None = None
    cancellation_reason: str | None = None

    @model_validator(mode="after")
    def _refund_within_amount(self) -> "Booking":
        if self.refunded_amount > self.amount:
            raise ValueError(
                f"refunded_amount ({self.refunded_amount}) exceeds amount ({self.amount})"
            )
        return self

    @property
    def refundable_balance(self) -> int:
        """Pence still available to refund."""
        return self.amount - self.refunded_amount
