"""Unit tests for the discount rule engine.

Covers sibling, bulk and early bird eligibility, stacking order, clamping
at zero and determinism under rule reordering.
"""

import datetime as dt
import itertools

import pytest

from coaching_core.models import (
    DiscountCartItem,
    DiscountConditions,
    DiscountKind,
    DiscountRule,
    DiscountScope,
    DiscountType,
    DiscountValue,
)
from coaching_core.services import DiscountService, describe_rule


def _item(item_id: str, child_id: str, parent_id: str = "P-1", price: int = 1000, **kwargs) -> DiscountCartItem:
    return DiscountCartItem(
        item_id=item_id, child_id=child_id, parent_id=parent_id, base_price=price, **kwargs
    )


def _rule(
    rule_id: str,
    rule_type: DiscountType,
    value: int,
    *,
    kind: DiscountKind = DiscountKind.PERCENTAGE,
    applies_to: DiscountScope = DiscountScope.TOTAL,
    priority: int = 0,
    **conditions: int,
) -> DiscountRule:
    return DiscountRule(
        rule_id=rule_id,
        name=rule_id.replace("-", " ").title(),
        type=rule_type,
        conditions=DiscountConditions(**conditions),
        discount=DiscountValue(kind=kind, value=value, applies_to=applies_to),
        priority=priority,
    )


SIBLING_20 = _rule(
    "sibling-20", DiscountType.SIBLING, 20, applies_to=DiscountScope.ADDITIONAL, priority=1, min_children=2
)
BULK_10 = _rule("bulk-10", DiscountType.BULK, 10, priority=2, min_quantity=3)


@pytest.fixture
def service() -> DiscountService:
    return DiscountService()


@pytest.fixture
def siblings() -> list[DiscountCartItem]:
    """Three children of one parent, one £10 item each."""
    return [_item("I-1", "C-1"), _item("I-2", "C-2"), _item("I-3", "C-3")]


class TestStacking:
    """Tests for applying several rules in priority order."""

    def test_sibling_then_bulk(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        """Children 2 and 3 get 20% off, then everyone gets 10% off what is left."""
        result = service.apply(siblings, [SIBLING_20, BULK_10], now)

        assert [item.final_price for item in result.items] == [900, 720, 720]
        assert result.original_total == 3000
        assert result.final_total == 2340
        assert result.discount_amount == 660

    def test_savings_per_rule(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        result = service.apply(siblings, [SIBLING_20, BULK_10], now)

        savings = {s.rule_id: (s.savings, s.items_affected) for s in result.applied_rules}
        assert savings == {"sibling-20": (400, 2), "bulk-10": (260, 3)}

    def test_applied_discounts_recorded_in_order(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        result = service.apply(siblings, [BULK_10, SIBLING_20], now)

        second = result.items[1]
        assert [d.rule_id for d in second.applied_discounts] == ["sibling-20", "bulk-10"]
        assert [d.amount for d in second.applied_discounts] == [200, 80]

    def test_priority_ties_broken_by_rule_id(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        """Equal priorities apply in rule ID order."""
        fixed = _rule("a-fixed", DiscountType.BULK, 100, kind=DiscountKind.FIXED, min_quantity=1)
        percent = _rule("b-percent", DiscountType.BULK, 50, min_quantity=1)

        result = service.apply([_item("I-1", "C-1")], [percent, fixed], now)

        # 1000 - 100 = 900, then 50% of 900
        assert result.items[0].final_price == 450

    def test_inactive_rules_ignored(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        inactive = SIBLING_20.model_copy(update={"is_active": False})

        result = service.apply(siblings, [inactive], now)

        assert result.final_total == 3000
        assert result.applied_rules == []


class TestDeterminism:
    """Shuffling the rules never changes the outcome."""

    def test_every_rule_order_gives_same_result(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        early_bird = _rule("early-5", DiscountType.EARLY_BIRD, 5, priority=3, days_before_session=7)
        cart = [
            item.model_copy(update={"session_start_date": now + dt.timedelta(days=20)})
            for item in siblings
        ]
        rules = [SIBLING_20, BULK_10, early_bird]

        results = {
            service.apply(cart, list(order), now).model_dump_json()
            for order in itertools.permutations(rules)
        }

        assert len(results) == 1


class TestNonNegativity:
    """Tests that no item price drops below zero."""

    def test_fixed_discount_clamped_to_price(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        rule = _rule("big-fixed", DiscountType.BULK, 1500, kind=DiscountKind.FIXED, min_quantity=1)

        result = service.apply([_item("I-1", "C-1")], [rule], now)

        applied = result.items[0].applied_discounts[0]
        assert result.items[0].final_price == 0
        assert applied.nominal_amount == 1500
        assert applied.amount == 1000
        assert applied.clamped is True

    def test_later_rules_skip_free_items(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        """Once an item is free, later rules take nothing from it."""
        first = _rule("a-free", DiscountType.BULK, 100, min_quantity=1, priority=1)
        second = _rule("b-fixed", DiscountType.BULK, 300, kind=DiscountKind.FIXED, min_quantity=1, priority=2)

        result = service.apply([_item("I-1", "C-1")], [first, second], now)

        assert result.items[0].final_price == 0
        assert [d.rule_id for d in result.items[0].applied_discounts] == ["a-free"]
        assert [s.rule_id for s in result.applied_rules] == ["a-free"]

    def test_all_prices_non_negative(
        self, service: DiscountService, siblings: list[DiscountCartItem], now: dt.datetime
    ) -> None:
        rules = [
            _rule("fixed-700", DiscountType.SIBLING, 700, kind=DiscountKind.FIXED, priority=1),
            _rule("fixed-600", DiscountType.BULK, 600, kind=DiscountKind.FIXED, priority=2),
            SIBLING_20,
        ]

        result = service.apply(siblings, rules, now)

        assert all(item.final_price >= 0 for item in result.items)
        assert result.final_total >= 0


class TestSiblingEligibility:
    """Tests for sibling rules."""

    def test_first_child_pays_full_price(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        """All of the first child's items are excluded, whatever the scope."""
        cart = [_item("I-1", "C-1"), _item("I-2", "C-1"), _item("I-3", "C-2")]
        rule = _rule("sibling", DiscountType.SIBLING, 10)

        result = service.apply(cart, [rule], now)

        assert [item.final_price for item in result.items] == [1000, 1000, 900]

    def test_families_grouped_by_parent(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        cart = [
            _item("I-1", "C-1", parent_id="P-1"),
            _item("I-2", "C-2", parent_id="P-2"),
            _item("I-3", "C-3", parent_id="P-1"),
        ]

        result = service.apply(cart, [SIBLING_20], now)

        assert [item.final_price for item in result.items] == [1000, 1000, 800]

    def test_min_children_not_met(self, service: DiscountService, now: dt.datetime) -> None:
        rule = _rule("sibling-3", DiscountType.SIBLING, 20, min_children=3)

        result = service.apply([_item("I-1", "C-1"), _item("I-2", "C-2")], [rule], now)

        assert result.discount_amount == 0


class TestBulkEligibility:
    """Tests for bulk rules."""

    def test_below_threshold(self, service: DiscountService, now: dt.datetime) -> None:
        result = service.apply([_item("I-1", "C-1"), _item("I-2", "C-1")], [BULK_10], now)

        assert result.discount_amount == 0

    def test_additional_scope_tie_skips_lowest_item_id(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        rule = _rule(
            "bulk-fixed",
            DiscountType.BULK,
            200,
            kind=DiscountKind.FIXED,
            applies_to=DiscountScope.ADDITIONAL,
            min_quantity=3,
        )
        cart = [_item(f"I-{n}", "C-1") for n in range(1, 4)]

        result = service.apply(cart, [rule], now)

        assert [item.final_price for item in result.items] == [1000, 800, 800]

    def test_additional_scope_skips_most_expensive_item(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        """The dearest item pays full price wherever it sits in the cart."""
        rule = _rule(
            "bulk-half",
            DiscountType.BULK,
            50,
            applies_to=DiscountScope.ADDITIONAL,
            min_quantity=2,
        )
        cart = [_item("I-1", "C-1", price=1000), _item("I-2", "C-1", price=3000)]

        totals = {
            service.apply(list(order), [rule], now).final_total
            for order in itertools.permutations(cart)
        }

        assert totals == {3500}

    def test_total_scope_discounts_every_item(
        self, service: DiscountService, now: dt.datetime
    ) -> None:
        rule = _rule("bulk-fixed", DiscountType.BULK, 200, kind=DiscountKind.FIXED, min_quantity=3)
        cart = [_item(f"I-{n}", "C-1") for n in range(1, 4)]

        result = service.apply(cart, [rule], now)

        assert [item.final_price for item in result.items] == [800, 800, 800]


class TestEarlyBirdEligibility:
    """Tests for early bird rules."""

    def test_only_far_enough_sessions(self, service: DiscountService, now: dt.datetime) -> None:
        rule = _rule("early-bird", DiscountType.EARLY_BIRD, 15, days_before_session=14)
        cart = [
            _item("I-1", "C-1", session_start_date=now + dt.timedelta(days=20)),
            _item("I-2", "C-1", session_start_date=now + dt.timedelta(days=14)),
            _item("I-3", "C-1", session_start_date=now + dt.timedelta(days=5)),
            _item("I-4", "C-1"),
        ]

        result = service.apply(cart, [rule], now)

        assert [item.final_price for item in result.items] == [850, 850, 1000, 1000]

    def test_no_cutoff_never_applies(self, service: DiscountService, now: dt.datetime) -> None:
        rule = _rule("early-bird", DiscountType.EARLY_BIRD, 15)
        cart = [_item("I-1", "C-1", session_start_date=now + dt.timedelta(days=60))]

        result = service.apply(cart, [rule], now)

        assert result.discount_amount == 0


class TestDiscountRuleParsing:
    """Tests for reading stored rule documents."""

    def test_type_alias_and_legacy_scope(self) -> None:
        rule = DiscountRule.model_validate(
            {
                "rule_id": "legacy",
                "type": "sibling",
                "discount": {"type": "percentage", "value": 10, "applies_to": "all"},
            }
        )

        assert rule.discount.kind == DiscountKind.PERCENTAGE
        assert rule.discount.applies_to == DiscountScope.TOTAL

    def test_empty_cart(self, service: DiscountService, now: dt.datetime) -> None:
        result = service.apply([], [SIBLING_20, BULK_10], now)

        assert result.items == []
        assert result.final_total == 0


class TestDescribeRule:
    """Tests for human-readable rule summaries."""

    def test_sibling(self) -> None:
        assert describe_rule(SIBLING_20) == (
            "20% off additional bookings when booking for 2+ children"
        )

    def test_bulk_fixed(self) -> None:
        rule = _rule("bulk", DiscountType.BULK, 250, kind=DiscountKind.FIXED, min_quantity=4)

        assert describe_rule(rule) == "2.50 off all bookings when booking 4+ sessions"

    def test_early_bird(self) -> None:
        rule = _rule("early", DiscountType.EARLY_BIRD, 10, days_before_session=21)

        assert describe_rule(rule) == "10% off when booking 21+ days in advance"
