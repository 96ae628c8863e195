"""Block booking (prepaid session package) models.

The usage and refund histories are append-only. ``deducted_sessions`` is
derived from the usage history so the two can never disagree.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from coaching_core.utils.money import divide

from .enums import BlockBookingStatus, PaymentMethod


class UsageRecord(BaseModel):
    """One session taken from a package."""

    model_config = ConfigDict(frozen=True)

    session_date: dt.date = Field(..., description="Date the session was attended")
    coach_id: str | None = None
    coach_name: str | None = None
    timetable_slot_id: str | None = None
    notes: str | None = None
    deducted_by: str | None = Field(default=None, description="Staff member who recorded it")
    created_at: dt.datetime = Field(..., description="When the deduction was recorded")


class RefundRecord(BaseModel):
    """One refund of unused sessions."""

    model_config = ConfigDict(frozen=True)

    sessions_refunded: int = Field(..., ge=0)
    amount_refunded: int = Field(..., ge=0, description="Pence")
    reason: str | None = None
    created_at: dt.datetime


class BlockBooking(BaseModel):
    """A prepaid bundle of sessions consumed over time."""

    model_config = ConfigDict(frozen=True)

    block_booking_id: str = Field(..., description="Unique package ID")
    student_name: str = Field(..., description="Child using the sessions")
    student_id: str | None = None
    parent_name: str | None = None
    parent_email: EmailStr | None = None
    total_sessions: int = Field(..., ge=1)
    total_paid: int = Field(..., ge=0, description="Pence")
    price_per_session: int | None = Field(default=None, ge=0, description="Pence")
    payment_method: PaymentMethod | None = None
    refunded_sessions: int = Field(default=0, ge=0)
    refunded_amount: int = Field(default=0, ge=0, description="Pence")
    status: BlockBookingStatus = BlockBookingStatus.ACTIVE
    purchased_at: dt.datetime
    expires_at: dt.datetime | None = None
    usage_history: tuple[UsageRecord, ...] = ()
    refund_history: tuple[RefundRecord, ...] = ()
    notes: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def deducted_sessions(self) -> int:
        return len(self.usage_history)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_sessions(self) -> int:
        return self.total_sessions - self.deducted_sessions - self.refunded_sessions

    @property
    def effective_price_per_session(self) -> int:
        """Stored price per session, else the paid total split evenly."""
        if self.price_per_session is not None:
            return self.price_per_session
        return divide(self.total_paid, self.total_sessions)


class BlockBookingCreate(BaseModel):
    """Data required to record a package purchase."""

    block_booking_id: str
    student_name: str = Field(..., min_length=1)
    student_id: str | None = None
    parent_name: str | None = None
    parent_email: EmailStr | None = None
    total_sessions: int
    total_paid: int
    price_per_session: int | None = None
    payment_method: PaymentMethod | None = None
    purchased_at: dt.datetime | None = None
    expires_at: dt.datetime | None = None
    notes: str | None = None


class DeductSessionInput(BaseModel):
    """A session attended against a package."""

    session_date: dt.date
    coach_id: str | None = None
    coach_name: str | None = None
    timetable_slot_id: str | None = None
    notes: str | None = None
    deducted_by: str | None = None


class RefundSessionsInput(BaseModel):
    """A request to refund unused sessions.

    Give a session count, an amount, both, or neither (refund everything
    left).
    """

    sessions_to_refund: int | None = None
    refund_amount: int | None = None
    reason: str | None = None


class BlockBookingSummary(BaseModel):
    """Read model for listing packages."""

    block_booking_id: str
    student_name: str
    total_sessions: int
    used_sessions: int
    refunded_sessions: int
    remaining_sessions: int
    percentage_used: int
    value_remaining: int
    status: BlockBookingStatus
    stored_status: BlockBookingStatus
    total_paid: int
    price_per_session: int
    last_used_at: dt.datetime | None = None
    expires_at: dt.datetime | None = None
    is_expiring_soon: bool = False
    days_until_expiry: int | None = None
