"""Block booking ledger: purchase, deduct, refund, expire and cancel packages.

State machine (refunded and cancelled are terminal):

    active --deduct (last session)--> exhausted
    active/exhausted --refund (last sessions)--> refunded
    active/exhausted/expired --cancel--> cancelled
    active/exhausted --expires_at passes, sessions left--> expired (derived)

Every method takes the current BlockBooking and returns the next one; nothing
is mutated in place, so the storage layer can compare-and-swap on the old
state. The balance invariants hold after every transition:

- deducted_sessions + refunded_sessions <= total_sessions
- deducted_sessions and refunded_sessions never decrease
"""

import datetime as dt
import math

from pydantic import BaseModel

from coaching_core.config import get_settings
from coaching_core.models import (
    BlockBooking,
    BlockBookingCreate,
    BlockBookingStatus,
    BlockBookingSummary,
    CapacityError,
    DeductSessionInput,
    ErrorCode,
    OverRefundError,
    RefundRecord,
    RefundSessionsInput,
    UsageRecord,
    ValidationError,
)
from coaching_core.utils.dates import has_passed, whole_days_until
from coaching_core.utils.logging import get_logger, log_ledger_operation
from coaching_core.utils.money import divide

logger = get_logger(__name__)

EXPIRABLE_STATUSES = (BlockBookingStatus.ACTIVE, BlockBookingStatus.EXHAUSTED)


class LedgerRefundResult(BaseModel):
    """Next package state plus the refund the caller has to pay out."""

    block_booking: BlockBooking
    refund: RefundRecord


class BlockBookingLedger:
    """Stateless rules for prepaid session packages."""

    def __init__(self, expiring_soon_days: int | None = None) -> None:
        """Initialize the ledger.

        Args:
            expiring_soon_days: Window for the expiring-soon flag; defaults to settings
        """
        if expiring_soon_days is None:
            expiring_soon_days = get_settings().expiring_soon_days
        self.expiring_soon_days = expiring_soon_days

    # Reads

    @staticmethod
    def effective_status(ledger: BlockBooking, now: dt.datetime) -> BlockBookingStatus:
        """Status as callers should see it at ``now``.

        A package past its expiry date with sessions left reads as expired
        even though the stored status is still active or exhausted.
        """
        if (
            ledger.status in EXPIRABLE_STATUSES
            and ledger.expires_at is not None
            and has_passed(ledger.expires_at, now)
            and ledger.remaining_sessions > 0
        ):
            return BlockBookingStatus.EXPIRED
        return ledger.status

    @staticmethod
    def refundable_balance(ledger: BlockBooking) -> int:
        """Most money that can still go back for the unused sessions."""
        by_sessions = ledger.remaining_sessions * ledger.effective_price_per_session
        return max(0, min(by_sessions, ledger.total_paid - ledger.refunded_amount))

    def summarize(self, ledger: BlockBooking, now: dt.datetime) -> BlockBookingSummary:
        """Build the list/detail read model for a package."""
        used = ledger.deducted_sessions
        last_used_at = max((u.created_at for u in ledger.usage_history), default=None)

        days_until_expiry = None
        expiring_soon = False
        if ledger.expires_at is not None:
            days_until_expiry = max(0, whole_days_until(ledger.expires_at, now))
            expiring_soon = (
                not has_passed(ledger.expires_at, now)
                and days_until_expiry <= self.expiring_soon_days
            )

        return BlockBookingSummary(
            block_booking_id=ledger.block_booking_id,
            student_name=ledger.student_name,
            total_sessions=ledger.total_sessions,
            used_sessions=used,
            refunded_sessions=ledger.refunded_sessions,
            remaining_sessions=ledger.remaining_sessions,
            percentage_used=round(used * 100 / ledger.total_sessions),
            value_remaining=self.refundable_balance(ledger),
            status=self.effective_status(ledger, now),
            stored_status=ledger.status,
            total_paid=ledger.total_paid,
            price_per_session=ledger.effective_price_per_session,
            last_used_at=last_used_at,
            expires_at=ledger.expires_at,
            is_expiring_soon=expiring_soon,
            days_until_expiry=days_until_expiry,
        )

    # Transitions

    def purchase(self, data: BlockBookingCreate, now: dt.datetime) -> BlockBooking:
        """Record a newly bought package.

        Raises:
            ValidationError: If the session count, amount or price is invalid
        """
        if data.total_sessions <= 0:
            raise ValidationError("Total sessions must be greater than 0")
        if data.total_paid < 0:
            raise ValidationError("Total paid cannot be negative")
        if data.price_per_session is not None and data.price_per_session < 0:
            raise ValidationError("Price per session cannot be negative")

        purchased_at = data.purchased_at or now
        if data.expires_at is not None and not has_passed(purchased_at, data.expires_at):
            raise ValidationError("Expiry date must be after the purchase date")

        price_per_session = data.price_per_session
        if price_per_session is None:
            price_per_session = divide(data.total_paid, data.total_sessions)

        ledger = BlockBooking(
            block_booking_id=data.block_booking_id,
            student_name=data.student_name.strip(),
            student_id=data.student_id,
            parent_name=data.parent_name,
            parent_email=data.parent_email,
            total_sessions=data.total_sessions,
            total_paid=data.total_paid,
            price_per_session=price_per_session,
            payment_method=data.payment_method,
            status=BlockBookingStatus.ACTIVE,
            purchased_at=purchased_at,
            expires_at=data.expires_at,
            notes=data.notes,
        )

        log_ledger_operation(
            logger,
            "purchase",
            entity_id=ledger.block_booking_id,
            amount_pence=ledger.total_paid,
            status=ledger.status.value,
            total_sessions=ledger.total_sessions,
        )
        return ledger

    def deduct(
        self,
        ledger: BlockBooking,
        usage: DeductSessionInput,
        now: dt.datetime,
    ) -> BlockBooking:
        """Take one attended session off the package.

        Raises:
            ValidationError: If the package is not active, or the date was already deducted
            CapacityError: If no sessions remain
        """
        status = self.effective_status(ledger, now)

        try:
            if status.is_terminal or status == BlockBookingStatus.EXPIRED:
                raise ValidationError(
                    f"Cannot deduct from a block booking with status '{status.value}'",
                    code=ErrorCode.INVALID_STATUS,
                )
            if ledger.remaining_sessions <= 0:
                raise CapacityError("No remaining sessions to deduct")
            if status != BlockBookingStatus.ACTIVE:
                raise ValidationError(
                    f"Cannot deduct from a block booking with status '{status.value}'",
                    code=ErrorCode.INVALID_STATUS,
                )
            if self._already_used(ledger, usage):
                raise ValidationError(
                    f"A session has already been deducted for {usage.session_date.isoformat()}",
                    code=ErrorCode.DUPLICATE_USAGE,
                )
        except (ValidationError, CapacityError) as exc:
            log_ledger_operation(
                logger, "deduct", entity_id=ledger.block_booking_id, error=exc.message
            )
            raise

        record = UsageRecord(
            session_date=usage.session_date,
            coach_id=usage.coach_id,
            coach_name=usage.coach_name,
            timetable_slot_id=usage.timetable_slot_id,
            notes=usage.notes.strip() if usage.notes else None,
            deducted_by=usage.deducted_by,
            created_at=now,
        )
        remaining_after = ledger.remaining_sessions - 1
        next_status = (
            BlockBookingStatus.EXHAUSTED if remaining_after == 0 else BlockBookingStatus.ACTIVE
        )

        updated = ledger.model_copy(
            update={
                "usage_history": (*ledger.usage_history, record),
                "status": next_status,
            }
        )
        self._check_invariants(ledger, updated)

        log_ledger_operation(
            logger,
            "deduct",
            entity_id=ledger.block_booking_id,
            status=next_status.value,
            remaining_sessions=updated.remaining_sessions,
        )
        return updated

    def refund(
        self,
        ledger: BlockBooking,
        request: RefundSessionsInput,
        now: dt.datetime,
    ) -> LedgerRefundResult:
        """Refund unused sessions.

        The caller may give a session count, an amount, or both. A missing
        count is derived from the amount (rounded up to whole sessions); a
        missing amount is sessions x price per session. Neither means refund
        everything left.

        Raises:
            ValidationError: For terminal packages or non-positive requests
            OverRefundError: If the request exceeds the remaining balance
        """
        try:
            sessions, amount = self._resolve_refund(ledger, request)
        except (ValidationError, OverRefundError) as exc:
            log_ledger_operation(
                logger, "refund", entity_id=ledger.block_booking_id, error=exc.message
            )
            raise

        record = RefundRecord(
            sessions_refunded=sessions,
            amount_refunded=amount,
            reason=request.reason.strip() if request.reason else None,
            created_at=now,
        )
        remaining_after = ledger.remaining_sessions - sessions
        next_status = BlockBookingStatus.REFUNDED if remaining_after == 0 else ledger.status

        updated = ledger.model_copy(
            update={
                "refunded_sessions": ledger.refunded_sessions + sessions,
                "refunded_amount": ledger.refunded_amount + amount,
                "refund_history": (*ledger.refund_history, record),
                "status": next_status,
            }
        )
        self._check_invariants(ledger, updated)

        log_ledger_operation(
            logger,
            "refund",
            entity_id=ledger.block_booking_id,
            amount_pence=amount,
            status=next_status.value,
            sessions_refunded=sessions,
            remaining_sessions=updated.remaining_sessions,
        )
        return LedgerRefundResult(block_booking=updated, refund=record)

    def expire(self, ledger: BlockBooking, now: dt.datetime) -> BlockBooking:
        """Materialise the derived expired status, for an optional periodic sweep.

        Usage and refund history are kept so the package can still be
        refunded or cancelled afterwards.
        """
        status = self.effective_status(ledger, now)
        if status != BlockBookingStatus.EXPIRED or ledger.status == status:
            return ledger

        log_ledger_operation(
            logger,
            "expire",
            entity_id=ledger.block_booking_id,
            status=status.value,
            remaining_sessions=ledger.remaining_sessions,
        )
        return ledger.model_copy(update={"status": status})

    def cancel(self, ledger: BlockBooking, now: dt.datetime) -> BlockBooking:
        """Admin override: move any non-terminal package to cancelled.

        Counters and histories are left exactly as they were.

        Raises:
            ValidationError: If the package is already refunded or cancelled
        """
        status = self.effective_status(ledger, now)
        if status.is_terminal:
            message = f"Cannot cancel a block booking with status '{status.value}'"
            log_ledger_operation(logger, "cancel", entity_id=ledger.block_booking_id, error=message)
            raise ValidationError(message, code=ErrorCode.INVALID_STATUS)

        updated = ledger.model_copy(update={"status": BlockBookingStatus.CANCELLED})
        self._check_invariants(ledger, updated)

        log_ledger_operation(
            logger,
            "cancel",
            entity_id=ledger.block_booking_id,
            status=updated.status.value,
            remaining_sessions=updated.remaining_sessions,
        )
        return updated

    # Helpers

    @staticmethod
    def _already_used(ledger: BlockBooking, usage: DeductSessionInput) -> bool:
        return any(
            record.session_date == usage.session_date
            and (usage.timetable_slot_id is None or record.timetable_slot_id == usage.timetable_slot_id)
            for record in ledger.usage_history
        )

    def _resolve_refund(
        self,
        ledger: BlockBooking,
        request: RefundSessionsInput,
    ) -> tuple[int, int]:
        """Work out (sessions, amount) for a refund request, or raise."""
        if ledger.status.is_terminal:
            raise ValidationError(
                f"Cannot refund a block booking with status '{ledger.status.value}'",
                code=ErrorCode.INVALID_STATUS,
            )

        sessions = request.sessions_to_refund
        amount = request.refund_amount
        if sessions is not None and sessions <= 0:
            raise ValidationError("Sessions to refund must be greater than 0")
        if amount is not None and amount < 0:
            raise ValidationError("Refund amount cannot be negative")

        remaining = ledger.remaining_sessions
        price = ledger.effective_price_per_session
        max_refundable = self.refundable_balance(ledger)

        if remaining <= 0:
            raise OverRefundError(
                "No sessions available to refund",
                max_refundable=0,
                max_sessions=0,
            )
        if sessions is not None and sessions > remaining:
            raise OverRefundError(
                f"Cannot refund {sessions} sessions. Only {remaining} remaining.",
                max_refundable=max_refundable,
                max_sessions=remaining,
            )
        if amount is not None and amount > max_refundable:
            raise OverRefundError(
                f"Refund amount exceeds maximum refundable amount of {max_refundable} pence",
                max_refundable=max_refundable,
                max_sessions=remaining,
            )
        if sessions is not None and amount is not None:
            # The money released can never outrun the sessions given back
            session_cap = min(sessions * price, max_refundable)
            if amount > session_cap:
                raise OverRefundError(
                    f"Refund amount exceeds {session_cap} pence for {sessions} sessions",
                    max_refundable=session_cap,
                    max_sessions=remaining,
                )

        if sessions is None:
            if amount is None:
                sessions = remaining
            elif price > 0:
                sessions = math.ceil(amount / price)
            else:
                sessions = remaining
            if sessions <= 0:
                raise ValidationError("A refund must cover at least one session")

        if amount is None:
            # Rounded per-session prices can overshoot what was actually paid
            amount = min(sessions * price, max_refundable)

        return sessions, amount

    @staticmethod
    def _check_invariants(previous: BlockBooking, updated: BlockBooking) -> None:
        if updated.deducted_sessions + updated.refunded_sessions > updated.total_sessions:
            raise CapacityError(
                "Deducted and refunded sessions would exceed the sessions purchased"
            )
        if (
            updated.deducted_sessions < previous.deducted_sessions
            or updated.refunded_sessions < previous.refunded_sessions
        ):
            raise CapacityError("Session counters can never decrease")
