"""API models for refund policy endpoints.

All amounts are in pence (e.g., 5000 = £50.00).
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from coaching_core.models import RefundPolicy, RefundScheduleEntry

from .common import ClockedRequest


class RefundEvaluateRequest(ClockedRequest):
    """Request to evaluate the refund for cancelling a booking."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "session_date": "2025-06-11T10:00:00Z",
                    "original_amount": 10000,
                    "now": "2025-06-01T09:00:00Z",
                }
            ]
        },
    )

    policy: RefundPolicy | None = Field(
        default=None,
        description="Policy to apply; the default policy is used when omitted",
    )
    session_date: dt.datetime = Field(..., description="When the session starts")
    original_amount: int = Field(..., description="Amount originally paid in pence")


class RefundScheduleRequest(BaseModel):
    """Request to preview every tier of a policy for an amount."""

    policy: RefundPolicy | None = None
    original_amount: int = Field(..., ge=0, description="Amount paid in pence")


class RefundScheduleResponse(BaseModel):
    """Refund available at each tier, most generous first."""

    policy_id: str
    entries: list[RefundScheduleEntry]
    description: str = Field(..., description="Human-readable policy summary")


class PolicyValidationResponse(BaseModel):
    """Outcome of checking a refund policy before it is saved."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "valid": False,
                    "errors": ["A rule for 0 days before session is required"],
                }
            ]
        },
    )

    valid: bool
    errors: list[str] = Field(default_factory=list)
