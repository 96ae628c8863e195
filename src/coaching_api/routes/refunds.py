"""Refund policy endpoints.

Provides REST endpoints for:
- Evaluating the refund for a cancellation
- Previewing the refund at every tier of a policy
- Validating a policy before staff save it

All amounts are in pence (e.g., 5000 = £50.00).
"""

from fastapi import APIRouter, Depends

from coaching_api.dependencies import get_refund_policy_service
from coaching_api.models.refunds import (
    PolicyValidationResponse,
    RefundEvaluateRequest,
    RefundScheduleRequest,
    RefundScheduleResponse,
)
from coaching_core.models import RefundEvaluation, RefundPolicy
from coaching_core.services import RefundPolicyService, get_default_policy

router = APIRouter(tags=["refunds"])


@router.post(
    "/refunds/evaluate",
    summary="Evaluate a cancellation refund",
    description="""
Calculate the refund for cancelling a booking under a policy.

The most generous tier the cancellation still qualifies for applies.
When no policy is sent, the default policy is used
(7+ days: 100%, 3+ days: 50%, otherwise no refund).

**Notes:**
- Amounts are in pence
- Days are counted in whole days, rounded down
- Sessions in the past are treated as 0 days away
""",
    response_model=RefundEvaluation,
    responses={
        200: {
            "description": "Refund evaluated",
            "content": {
                "application/json": {
                    "example": {
                        "refund_percentage": 100,
                        "refund_amount": 10000,
                        "days_until_session": 10,
                        "explanation": (
                            "Full refund (100%): Cancelled 10 days before the session "
                            "(policy: 7+ days = 100% refund)"
                        ),
                        "applied_rule": {"days_before_session": 7, "refund_percentage": 100},
                    }
                }
            },
        },
        422: {"description": "Negative amount or out-of-range refund percentage"},
    },
)
async def evaluate_refund(
    request: RefundEvaluateRequest,
    service: RefundPolicyService = Depends(get_refund_policy_service),
) -> RefundEvaluation:
    """Evaluate a refund for one cancellation."""
    return service.evaluate(
        request.policy,
        request.session_date,
        request.resolved_now(),
        request.original_amount,
    )


@router.post(
    "/refunds/schedule",
    summary="Preview a refund schedule",
    description="Refund amount available at each tier of a policy, most generous first.",
    response_model=RefundScheduleResponse,
)
async def refund_schedule(
    request: RefundScheduleRequest,
    service: RefundPolicyService = Depends(get_refund_policy_service),
) -> RefundScheduleResponse:
    """Preview every tier of a policy."""
    policy = request.policy or get_default_policy()
    return RefundScheduleResponse(
        policy_id=policy.policy_id,
        entries=service.schedule(policy, request.original_amount),
        description=service.get_policy_description(policy),
    )


@router.post(
    "/refund-policies/validate",
    summary="Validate a refund policy",
    description="""
Check a refund policy before it is saved.

A policy needs a name, at least one rule, a rule for 0 days before the
session and no duplicate thresholds. Percentages outside 0-100 and negative
thresholds are rejected with 422.
""",
    response_model=PolicyValidationResponse,
)
async def validate_refund_policy(
    policy: RefundPolicy,
    service: RefundPolicyService = Depends(get_refund_policy_service),
) -> PolicyValidationResponse:
    """Validate a policy and list every problem found."""
    errors = service.validate_policy(policy)
    return PolicyValidationResponse(valid=not errors, errors=errors)
