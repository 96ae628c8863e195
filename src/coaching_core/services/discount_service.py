"""Discount rule engine for booking carts.

Active rules are applied one after another in ascending priority order
(lower number first, rule ID breaking ties), so the outcome never depends on
the order rules were loaded in. Each rule:

1. Decides which cart items are eligible (by rule type, see ELIGIBILITY)
2. Optionally skips the first eligible unit (applies_to = additional)
3. Takes its discount off each eligible item's running price

A percentage is taken from the price left after earlier rules. A fixed
amount is taken per item. Either way an item never drops below zero, and
the amount recorded is what was actually taken.
"""

import datetime as dt
from collections.abc import Callable, Sequence

from coaching_core.models import (
    AppliedDiscount,
    DiscountCartItem,
    DiscountedItem,
    DiscountKind,
    DiscountResult,
    DiscountRule,
    DiscountScope,
    DiscountType,
    RuleSavings,
)
from coaching_core.utils.dates import whole_days_until
from coaching_core.utils.logging import get_logger, log_ledger_operation
from coaching_core.utils.money import percentage_of

logger = get_logger(__name__)

DEFAULT_MIN_CHILDREN = 2
DEFAULT_MIN_QUANTITY = 2

# Eligibility functions return cart indexes in cart order
EligibilityFn = Callable[[DiscountRule, Sequence[DiscountCartItem], dt.datetime], list[int]]


def _sibling_items(
    rule: DiscountRule,
    items: Sequence[DiscountCartItem],
    now: dt.datetime,
) -> list[int]:
    """Items belonging to the second and later children of each family.

    Children are ranked by where they first appear in the cart; the first
    child in a family pays full price.
    """
    min_children = rule.conditions.min_children or DEFAULT_MIN_CHILDREN

    families: dict[str | None, list[str]] = {}
    for item in items:
        children = families.setdefault(item.parent_id, [])
        if item.child_id not in children:
            children.append(item.child_id)

    additional: set[tuple[str | None, str]] = set()
    for parent_id, children in families.items():
        if len(children) >= min_children:
            additional.update((parent_id, child_id) for child_id in children[1:])

    return [
        index
        for index, item in enumerate(items)
        if (item.parent_id, item.child_id) in additional
    ]


def _bulk_items(
    rule: DiscountRule,
    items: Sequence[DiscountCartItem],
    now: dt.datetime,
) -> list[int]:
    """Every item, once the cart holds enough of them."""
    min_quantity = rule.conditions.min_quantity or DEFAULT_MIN_QUANTITY
    if len(items) < min_quantity:
        return []
    return list(range(len(items)))


def _early_bird_items(
    rule: DiscountRule,
    items: Sequence[DiscountCartItem],
    now: dt.datetime,
) -> list[int]:
    """Items whose session is far enough away."""
    cutoff = rule.conditions.days_before_session
    if cutoff is None:
        return []
    return [
        index
        for index, item in enumerate(items)
        if item.session_start_date is not None
        and whole_days_until(item.session_start_date, now) >= cutoff
    ]


ELIGIBILITY: dict[DiscountType, EligibilityFn] = {
    DiscountType.SIBLING: _sibling_items,
    DiscountType.BULK: _bulk_items,
    DiscountType.EARLY_BIRD: _early_bird_items,
}


def describe_rule(rule: DiscountRule) -> str:
    """Human-readable summary of a discount rule."""
    discount = rule.discount
    if discount.kind == DiscountKind.PERCENTAGE:
        amount_text = f"{discount.value}% off"
    else:
        amount_text = f"{discount.value / 100:.2f} off"

    if discount.applies_to == DiscountScope.ADDITIONAL:
        scope_text = "additional bookings"
    else:
        scope_text = "all bookings"

    conditions = rule.conditions
    if rule.type == DiscountType.SIBLING:
        children = conditions.min_children or DEFAULT_MIN_CHILDREN
        return f"{amount_text} {scope_text} when booking for {children}+ children"
    if rule.type == DiscountType.BULK:
        quantity = conditions.min_quantity or DEFAULT_MIN_QUANTITY
        return f"{amount_text} {scope_text} when booking {quantity}+ sessions"
    return f"{amount_text} when booking {conditions.days_before_session}+ days in advance"


class DiscountService:
    """Applies staff-configured discount rules to a cart."""

    @staticmethod
    def ordered_rules(rules: Sequence[DiscountRule]) -> list[DiscountRule]:
        """Active rules in the order they are applied."""
        return sorted(
            (rule for rule in rules if rule.is_active),
            key=lambda rule: (rule.priority, rule.rule_id),
        )

    @staticmethod
    def eligible_indexes(
        rule: DiscountRule,
        items: Sequence[DiscountCartItem],
        now: dt.datetime,
    ) -> list[int]:
        """Cart positions the rule will discount.

        For bulk and early bird rules scoped to additional bookings, the most
        expensive eligible item pays full price (ties go to the lowest
        item_id), so the result does not depend on cart order.
        """
        indexes = ELIGIBILITY[rule.type](rule, items, now)
        if (
            indexes
            and rule.discount.applies_to == DiscountScope.ADDITIONAL
            and rule.type != DiscountType.SIBLING
        ):
            # Sibling eligibility already leaves out the first child
            full_price = min(
                indexes, key=lambda i: (-items[i].base_price, items[i].item_id)
            )
            indexes = [i for i in indexes if i != full_price]
        return indexes

    @staticmethod
    def nominal_discount(rule: DiscountRule, running_price: int) -> int:
        """What the rule asks to take off an item priced at running_price."""
        if rule.discount.kind == DiscountKind.PERCENTAGE:
            return percentage_of(running_price, rule.discount.value)
        return rule.discount.value

    def apply(
        self,
        items: Sequence[DiscountCartItem],
        rules: Sequence[DiscountRule],
        now: dt.datetime | None = None,
    ) -> DiscountResult:
        """Calculate discounts for a cart.

        Args:
            items: Cart items in the order they were added
            rules: Discount rules in any order; inactive ones are ignored
            now: Booking time, used by early bird rules (defaults to now, UTC)

        Returns:
            DiscountResult with per-item discounts, totals and per-rule savings
        """
        if now is None:
            now = dt.datetime.now(dt.UTC)

        running = [item.base_price for item in items]
        applied: list[list[AppliedDiscount]] = [[] for _ in items]
        savings: list[RuleSavings] = []

        for rule in self.ordered_rules(rules):
            rule_savings = 0
            affected = 0
            for index in self.eligible_indexes(rule, items, now):
                nominal = self.nominal_discount(rule, running[index])
                taken = min(nominal, running[index])
                if taken <= 0:
                    continue
                running[index] -= taken
                applied[index].append(
                    AppliedDiscount(
                        rule_id=rule.rule_id,
                        rule_type=rule.type,
                        nominal_amount=nominal,
                        amount=taken,
                        clamped=taken < nominal,
                    )
                )
                rule_savings += taken
                affected += 1

            if rule_savings > 0:
                savings.append(
                    RuleSavings(
                        rule_id=rule.rule_id,
                        name=rule.name,
                        savings=rule_savings,
                        items_affected=affected,
                    )
                )

        discounted = [
            DiscountedItem(
                item_id=item.item_id,
                child_id=item.child_id,
                parent_id=item.parent_id,
                session_id=item.session_id,
                base_price=item.base_price,
                applied_discounts=applied[index],
                final_price=running[index],
            )
            for index, item in enumerate(items)
        ]

        original_total = sum(item.base_price for item in items)
        final_total = sum(running)
        result = DiscountResult(
            items=discounted,
            original_total=original_total,
            discount_amount=original_total - final_total,
            final_total=final_total,
            applied_rules=savings,
        )

        if savings:
            log_ledger_operation(
                logger,
                "discount_applied",
                amount_pence=result.discount_amount,
                item_count=len(items),
                rules_applied=",".join(s.rule_id for s in savings),
            )
        return result
