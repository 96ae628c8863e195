"""Refund policy service for calculating cancellation refunds.

A policy is a set of tiers, each saying "cancel at least N days before the
session and get P% back". The most generous tier the cancellation still
qualifies for wins:

- Tiers are sorted by days_before_session, highest first
- The first tier with days_before_session <= days until the session applies
- No qualifying tier (or no tiers at all) means no refund

All amounts are in pence. Refunds are always a percentage of the amount
originally paid, never of what is left after an earlier partial refund.
"""

import datetime as dt

from coaching_core.config import get_settings
from coaching_core.models import (
    ErrorCode,
    RefundEvaluation,
    RefundPolicy,
    RefundRule,
    RefundScheduleEntry,
    ValidationError,
)
from coaching_core.utils.dates import whole_days_until
from coaching_core.utils.logging import get_logger, log_ledger_operation
from coaching_core.utils.money import percentage_of

logger = get_logger(__name__)

DEFAULT_REFUND_POLICY = RefundPolicy(
    policy_id="default",
    name="Standard Refund Policy",
    description="Default refund policy for session cancellations",
    rules=[
        RefundRule(days_before_session=7, refund_percentage=100),
        RefundRule(days_before_session=3, refund_percentage=50),
        RefundRule(days_before_session=0, refund_percentage=0),
    ],
    is_default=True,
)


def get_default_policy() -> RefundPolicy:
    """Return the policy used when none is configured.

    COACHING_DEFAULT_REFUND_POLICY replaces the built-in tiers.
    """
    rules = get_settings().default_refund_rules
    if rules is None:
        return DEFAULT_REFUND_POLICY
    return DEFAULT_REFUND_POLICY.model_copy(update={"rules": list(rules)})


class RefundPolicyService:
    """Service for calculating refund amounts based on cancellation timing."""

    @staticmethod
    def find_applicable_rule(
        days_until_session: int,
        rules: list[RefundRule],
    ) -> RefundRule | None:
        """Pick the most generous tier the cancellation still qualifies for.

        Args:
            days_until_session: Whole days left before the session
            rules: Policy tiers in any order

        Returns:
            The matching tier, or None when no tier qualifies
        """
        ordered = sorted(rules, key=lambda r: r.days_before_session, reverse=True)
        for rule in ordered:
            if rule.days_before_session <= days_until_session:
                return rule
        return None

    def evaluate(
        self,
        policy: RefundPolicy | None,
        session_date: dt.date | dt.datetime,
        now: dt.datetime,
        original_amount: int,
    ) -> RefundEvaluation:
        """Calculate the refund for cancelling a session booking.

        The caller is expected to reject sessions that have already started
        (see ensure_cancellable); a past session is treated as 0 days away.

        Args:
            policy: Policy to apply; None means the default policy
            session_date: When the session starts
            now: Time of the cancellation request
            original_amount: Amount originally paid, in pence

        Returns:
            RefundEvaluation with the amount, percentage and explanation

        Raises:
            ValidationError: If original_amount is negative
        """
        if original_amount < 0:
            raise ValidationError(f"Original amount cannot be negative (got {original_amount})")

        if policy is None:
            policy = get_default_policy()

        days_until_session = max(0, whole_days_until(session_date, now))
        rule = self.find_applicable_rule(days_until_session, policy.rules)

        if rule is None:
            evaluation = RefundEvaluation(
                refund_percentage=0,
                refund_amount=0,
                days_until_session=days_until_session,
                explanation=(
                    f"No refund (0%): Cancelled {days_until_session} days before the session "
                    f"(no refund tier applies)"
                ),
            )
        else:
            percentage = rule.refund_percentage
            evaluation = RefundEvaluation(
                refund_percentage=percentage,
                refund_amount=percentage_of(original_amount, percentage),
                days_until_session=days_until_session,
                explanation=self._explain(days_until_session, rule),
                applied_rule=rule,
            )

        log_ledger_operation(
            logger,
            "refund_evaluated",
            amount_pence=evaluation.refund_amount,
            policy_id=policy.policy_id,
            refund_percentage=evaluation.refund_percentage,
            days_until_session=days_until_session,
        )
        return evaluation

    @staticmethod
    def _explain(days_until_session: int, rule: RefundRule) -> str:
        percentage = rule.refund_percentage
        tier = f"policy: {rule.days_before_session}+ days = {percentage}% refund"
        if percentage >= 100:
            return (
                f"Full refund (100%): Cancelled {days_until_session} days before the session "
                f"({tier})"
            )
        if percentage <= 0:
            return (
                f"No refund (0%): Cancelled {days_until_session} days before the session "
                f"({tier})"
            )
        return (
            f"Partial refund ({percentage}%): Cancelled {days_until_session} days before "
            f"the session ({tier})"
        )

    @staticmethod
    def ensure_cancellable(session_date: dt.date | dt.datetime, now: dt.datetime) -> None:
        """Reject cancellations for sessions that have already started.

        Raises:
            ValidationError: With SESSION_STARTED when the session is in the past
        """
        if whole_days_until(session_date, now) < 0:
            raise ValidationError(code=ErrorCode.SESSION_STARTED)

    def schedule(
        self,
        policy: RefundPolicy | None,
        original_amount: int,
    ) -> list[RefundScheduleEntry]:
        """Preview the refund available at each tier of a policy.

        Args:
            policy: Policy to preview; None means the default policy
            original_amount: Amount paid, in pence

        Returns:
            One entry per tier, most generous threshold first
        """
        if policy is None:
            policy = get_default_policy()

        ordered = sorted(policy.rules, key=lambda r: r.days_before_session, reverse=True)
        return [
            RefundScheduleEntry(
                days_before_session=rule.days_before_session,
                refund_percentage=rule.refund_percentage,
                refund_amount=percentage_of(original_amount, rule.refund_percentage),
            )
            for rule in ordered
        ]

    @staticmethod
    def validate_policy(policy: RefundPolicy) -> list[str]:
        """Check a policy before staff save it.

        Returns:
            Validation error messages; empty when the policy is valid
        """
        errors: list[str] = []

        if not policy.name.strip():
            errors.append("Policy name is required")

        if not policy.rules:
            errors.append("At least one refund rule is required")
            return errors

        # Last-minute cancellations need a tier of their own
        if not any(r.days_before_session == 0 for r in policy.rules):
            errors.append("A rule for 0 days before session is required")

        days = [r.days_before_session for r in policy.rules]
        if len(days) != len(set(days)):
            errors.append("Duplicate days before session values are not allowed")

        return errors

    def get_policy_description(self, policy: RefundPolicy | None = None) -> str:
        """Get human-readable description of a refund policy."""
        if policy is None:
            policy = get_default_policy()

        lines = [f"{policy.name or 'Cancellation Policy'}:"]
        ordered = sorted(policy.rules, key=lambda r: r.days_before_session, reverse=True)
        for rule in ordered:
            if rule.refund_percentage <= 0:
                outcome = "No refund"
            elif rule.refund_percentage >= 100:
                outcome = "Full refund (100%)"
            else:
                outcome = f"Partial refund ({rule.refund_percentage}%)"
            lines.append(f"• {rule.days_before_session}+ days before the session: {outcome}")
        lines.append("• After the session has started: No refund")
        return "\n".join(lines)
