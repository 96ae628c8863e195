"""Refund policy models for self-service cancellations."""

from pydantic import BaseModel, ConfigDict, Field

from .booking import Booking
from .enums import RefundStatus


class RefundRule(BaseModel):
    """One tier of a refund policy.

    Cancelling at least ``days_before_session`` days ahead earns
    ``refund_percentage`` percent back.
    """

    model_config = ConfigDict(frozen=True)

    days_before_session: int = Field(..., ge=0, description="Minimum days before the session")
    refund_percentage: int = Field(..., ge=0, le=100, description="Refund percentage (0-100)")


class RefundPolicy(BaseModel):
    """A named set of refund tiers."""

    model_config = ConfigDict(frozen=True)

    policy_id: str = Field(default="custom", description="Policy ID")
    name: str = Field(default="", description="Policy name")
    description: str | None = None
    rules: list[RefundRule] = Field(default_factory=list)
    is_default: bool = False


class RefundEvaluation(BaseModel):
    """Result of evaluating a refund policy for one cancellation."""

    refund_percentage: int = Field(..., ge=0, le=100)
    refund_amount: int = Field(..., ge=0, description="Refund in pence")
    days_until_session: int = Field(..., ge=0)
    explanation: str
    applied_rule: RefundRule | None = None


class RefundScheduleEntry(BaseModel):
    """What a cancellation would refund at one tier of a policy."""

    days_before_session: int
    refund_percentage: int
    refund_amount: int


class CancellationResult(BaseModel):
    """Outcome of cancelling a booking.

    ``booking`` is the next state to persist. A ``pending`` refund status
    means the caller must move ``refund_amount`` through the payment gateway.
    """

    booking: Booking
    evaluation: RefundEvaluation | None = None
    refund_amount: int = Field(..., ge=0)
    refund_status: RefundStatus
