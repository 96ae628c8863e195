"""Session transfer reconciliation.

Moving a paid booking to another session has one of three outcomes,
depending on target price minus current price:

- Positive: checkout_required. The caller collects the difference first and
  then calls complete_checkout; the booking is untouched until then.
- Negative: refund_and_transfer. The booking moves now and the difference
  is refunded, capped at what is still refundable.
- Zero: transfer_only. The booking moves with no money changing hands.

Full sessions and age mismatches are refused before any price is computed.
"""

import datetime as dt
from collections.abc import Iterable

from coaching_core.models import (
    Booking,
    BookingStatus,
    CapacityError,
    EligibilityError,
    ErrorCode,
    PaymentStatus,
    Session,
    TransferAction,
    TransferOption,
    TransferResult,
    ValidationError,
)
from coaching_core.utils.dates import has_passed
from coaching_core.utils.logging import get_logger, log_ledger_operation

logger = get_logger(__name__)

# A confirmed booking whose money went back on a downgrade still holds its place
TRANSFERABLE_PAYMENT_STATUSES = (
    PaymentStatus.PAID,
    PaymentStatus.PARTIALLY_REFUNDED,
    PaymentStatus.REFUNDED,
)


class TransferService:
    """Works out the monetary consequence of a session transfer."""

    def _check_transfer(
        self,
        current_session: Session,
        target_session: Session,
        booking: Booking,
        child_age: int | None,
    ) -> None:
        if (
            booking.status != BookingStatus.CONFIRMED
            or booking.payment_status not in TRANSFERABLE_PAYMENT_STATUSES
        ):
            raise ValidationError(
                "Only confirmed and paid bookings can be transferred",
                code=ErrorCode.INVALID_STATUS,
            )
        if booking.session_id != current_session.session_id:
            raise ValidationError(
                f"Booking {booking.booking_id} is not for session {current_session.session_id}"
            )
        if target_session.session_id == current_session.session_id:
            raise ValidationError("The booking is already in the selected session")
        if target_session.is_full:
            raise CapacityError(f"Session {target_session.session_id} is full")
        if not target_session.accepts_age(child_age):
            raise EligibilityError(
                f"Session {target_session.session_id} is for ages "
                f"{target_session.age_min if target_session.age_min is not None else 'any'}"
                f"-{target_session.age_max if target_session.age_max is not None else 'any'}"
            )

    @staticmethod
    def _moved(
        current_session: Session, target_session: Session, now: dt.datetime
    ) -> dict[str, object]:
        return {
            "session_id": target_session.session_id,
            "transferred_from": current_session.session_id,
            "transferred_at": now,
        }

    def reconcile(
        self,
        current_session: Session,
        target_session: Session,
        booking: Booking,
        now: dt.datetime | None = None,
        child_age: int | None = None,
    ) -> TransferResult:
        """Decide what a transfer costs and return the next booking state.

        Args:
            current_session: Session the booking is in now
            target_session: Session the parent wants instead
            booking: Current booking state
            now: Time of the request (defaults to now, UTC)
            child_age: Child's age, checked against the target's age range

        Returns:
            TransferResult with the action, price difference and next booking

        Raises:
            ValidationError: If the booking cannot be transferred
            CapacityError: If the target session is full or closed
            EligibilityError: If the child is outside the target's age range
        """
        if now is None:
            now = dt.datetime.now(dt.UTC)

        try:
            self._check_transfer(current_session, target_session, booking, child_age)
        except (ValidationError, CapacityError, EligibilityError) as exc:
            log_ledger_operation(logger, "transfer", entity_id=booking.booking_id, error=exc.message)
            raise

        price_difference = target_session.price - current_session.price

        if price_difference > 0:
            result = TransferResult(
                action=TransferAction.CHECKOUT_REQUIRED,
                price_difference=price_difference,
                booking=booking,
            )
        elif price_difference < 0:
            owed = -price_difference
            refund = min(owed, booking.refundable_balance)
            refunded_amount = booking.refunded_amount + refund

            payment_status = booking.payment_status
            if refund > 0:
                payment_status = (
                    PaymentStatus.REFUNDED
                    if refunded_amount == booking.amount
                    else PaymentStatus.PARTIALLY_REFUNDED
                )

            result = TransferResult(
                action=TransferAction.REFUND_AND_TRANSFER,
                price_difference=price_difference,
                booking=booking.model_copy(
                    update={
                        **self._moved(current_session, target_session, now),
                        "refunded_amount": refunded_amount,
                        "payment_status": payment_status,
                    }
                ),
                refund_amount=refund,
                refund_shortfall=owed - refund,
            )
        else:
            result = TransferResult(
                action=TransferAction.TRANSFER_ONLY,
                price_difference=0,
                booking=booking.model_copy(
                    update=self._moved(current_session, target_session, now)
                ),
            )

        log_ledger_operation(
            logger,
            "transfer",
            entity_id=booking.booking_id,
            amount_pence=result.refund_amount,
            action=result.action.value,
            price_difference=price_difference,
            refund_shortfall=result.refund_shortfall,
        )
        return result

    def complete_checkout(
        self,
        booking: Booking,
        current_session: Session,
        target_session: Session,
        now: dt.datetime | None = None,
        child_age: int | None = None,
    ) -> Booking:
        """Move a booking once the upgrade difference has been paid.

        The booking amount grows by the difference collected. Capacity and
        eligibility are checked again since the target may have filled up
        while the parent was paying.

        Raises:
            ValidationError: If the transfer is not an upgrade
            CapacityError: If the target session filled up meanwhile
            EligibilityError: If the child is outside the target's age range
        """
        if now is None:
            now = dt.datetime.now(dt.UTC)

        self._check_transfer(current_session, target_session, booking, child_age)
        price_difference = target_session.price - current_session.price
        if price_difference <= 0:
            raise ValidationError("Checkout is only needed when the new session costs more")

        updated = booking.model_copy(
            update={
                **self._moved(current_session, target_session, now),
                "amount": booking.amount + price_difference,
            }
        )
        log_ledger_operation(
            logger,
            "transfer_checkout_completed",
            entity_id=booking.booking_id,
            amount_pence=price_difference,
            session_id=target_session.session_id,
        )
        return updated

    def list_transfer_options(
        self,
        current_session: Session,
        candidates: Iterable[Session],
        now: dt.datetime,
        child_age: int | None = None,
    ) -> list[TransferOption]:
        """Sessions a booking could move to, ordered by weekday then start time.

        Keeps future, open, age-appropriate sessions other than the current
        one, and of the same service type when the current session has one.
        """
        options: list[TransferOption] = []
        for session in candidates:
            if session.session_id == current_session.session_id:
                continue
            if current_session.service_type and session.service_type != current_session.service_type:
                continue
            if not has_passed(now, session.start_date):
                # Already started
                continue
            if session.is_full or not session.accepts_age(child_age):
                continue
            options.append(
                TransferOption(
                    session_id=session.session_id,
                    name=session.name,
                    day_of_week=session.day_of_week,
                    start_time=session.start_time,
                    start_date=session.start_date,
                    price=session.price,
                    spots_left=session.spots_left,
                    price_difference=session.price - current_session.price,
                    age_min=session.age_min,
                    age_max=session.age_max,
                )
            )

        return sorted(options, key=lambda o: (o.day_of_week, o.start_time or "", o.session_id))
