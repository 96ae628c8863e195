"""Booking cancellation: apply a refund policy and close the booking.

The refund is a policy percentage of the amount originally paid, capped at
whatever has not already been refunded (a transfer downgrade may have
refunded part of it), so a booking is never refunded twice.
"""

import datetime as dt

from coaching_core.models import (
    Booking,
    BookingStatus,
    CancellationResult,
    ErrorCode,
    PaymentStatus,
    RefundPolicy,
    RefundStatus,
    Session,
    ValidationError,
)
from coaching_core.utils.logging import get_logger, log_ledger_operation

from .refund_policy_service import RefundPolicyService

logger = get_logger(__name__)

UNPAID_STATUSES = (PaymentStatus.PENDING, PaymentStatus.FAILED)


class CancellationService:
    """Cancels bookings according to a refund policy."""

    def __init__(self, refund_policy: RefundPolicyService | None = None) -> None:
        """Initialize cancellation service.

        Args:
            refund_policy: Policy evaluator (a default one is created if omitted)
        """
        self.refund_policy = refund_policy or RefundPolicyService()

    def cancel(
        self,
        booking: Booking,
        session: Session,
        policy: RefundPolicy | None,
        now: dt.datetime,
        reason: str | None = None,
    ) -> CancellationResult:
        """Cancel a booking and work out its refund.

        Args:
            booking: Current booking state
            session: Session the booking is for
            policy: Refund policy; None means the default policy
            now: Time of the cancellation request
            reason: Optional reason given by the parent

        Returns:
            CancellationResult with the next booking state and refund details

        Raises:
            ValidationError: If the booking is already cancelled or the session has started
        """
        if booking.status == BookingStatus.CANCELLED:
            message = "Booking has already been cancelled"
            log_ledger_operation(logger, "cancel_booking", entity_id=booking.booking_id, error=message)
            raise ValidationError(message, code=ErrorCode.INVALID_STATUS)
        if booking.session_id != session.session_id:
            raise ValidationError(
                f"Booking {booking.booking_id} is not for session {session.session_id}"
            )

        self.refund_policy.ensure_cancellable(session.start_date, now)

        closed = {
            "status": BookingStatus.CANCELLED,
            "cancelled_at": now,
            "cancellation_reason": reason.strip() if reason else None,
        }

        if booking.payment_status in UNPAID_STATUSES:
            # Nothing was taken, so nothing goes back
            result = CancellationResult(
                booking=booking.model_copy(update=closed),
                refund_amount=0,
                refund_status=RefundStatus.NONE,
            )
        else:
            evaluation = self.refund_policy.evaluate(policy, session.start_date, now, booking.amount)
            refund = min(evaluation.refund_amount, booking.refundable_balance)
            refunded_amount = booking.refunded_amount + refund

            payment_status = booking.payment_status
            if refund > 0:
                payment_status = (
                    PaymentStatus.REFUNDED
                    if refunded_amount == booking.amount
                    else PaymentStatus.PARTIALLY_REFUNDED
                )

            result = CancellationResult(
                booking=booking.model_copy(
                    update={
                        **closed,
                        "refunded_amount": refunded_amount,
                        "payment_status": payment_status,
                    }
                ),
                evaluation=evaluation,
                refund_amount=refund,
                refund_status=RefundStatus.PENDING if refund > 0 else RefundStatus.NONE,
            )

        log_ledger_operation(
            logger,
            "cancel_booking",
            entity_id=booking.booking_id,
            amount_pence=result.refund_amount,
            status=result.booking.payment_status.value,
            refund_status=result.refund_status.value,
        )
        return result
