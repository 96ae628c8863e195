"""Discount rule and cart models.

Discount values are either a percentage (0-100) or a fixed amount in pence.
"""

import datetime as dt
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .enums import DiscountKind, DiscountScope, DiscountType


class DiscountConditions(BaseModel):
    """Thresholds a cart has to meet before a rule applies."""

    model_config = ConfigDict(frozen=True)

    min_children: int | None = Field(default=None, ge=1, description="Sibling rules")
    min_quantity: int | None = Field(default=None, ge=1, description="Bulk rules")
    days_before_session: int | None = Field(default=None, ge=0, description="Early bird rules")


class DiscountValue(BaseModel):
    """How much a rule takes off, and from which items."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: DiscountKind = Field(..., validation_alias=AliasChoices("kind", "type"))
    value: int = Field(..., ge=0, description="Percentage or pence")
    applies_to: DiscountScope = Field(default=DiscountScope.TOTAL)

    @field_validator("applies_to", mode="before")
    @classmethod
    def _legacy_all_scope(cls, value: Any) -> Any:
        # Rules saved before the rename still say "all"
        if value == "all":
            return DiscountScope.TOTAL
        return value


class DiscountRule(BaseModel):
    """A staff-configured discount."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(..., description="Unique rule ID")
    name: str = Field(default="", description="Display name")
    description: str | None = None
    type: DiscountType
    conditions: DiscountConditions = Field(default_factory=DiscountConditions)
    discount: DiscountValue
    priority: int = Field(default=0, description="Lower numbers are applied first")
    is_active: bool = True


class DiscountCartItem(BaseModel):
    """One bookable item in a parent's cart."""

    model_config = ConfigDict(frozen=True)

    item_id: str = Field(..., description="Cart line ID")
    child_id: str = Field(..., description="Child the item is for")
    parent_id: str | None = Field(default=None, description="Groups siblings together")
    session_id: str | None = None
    base_price: int = Field(..., ge=0, description="Undiscounted price in pence")
    session_start_date: dt.datetime | None = Field(
        default=None, description="Needed for early bird rules"
    )


class AppliedDiscount(BaseModel):
    """A discount actually taken off one item."""

    rule_id: str
    rule_type: DiscountType
    nominal_amount: int = Field(..., ge=0, description="What the rule asked for")
    amount: int = Field(..., ge=0, description="What was taken after clamping")
    clamped: bool = False


class DiscountedItem(BaseModel):
    """A cart item with its discounts applied."""

    item_id: str
    child_id: str
    parent_id: str | None = None
    session_id: str | None = None
    base_price: int
    applied_discounts: list[AppliedDiscount] = Field(default_factory=list)
    final_price: int = Field(..., ge=0)


class RuleSavings(BaseModel):
    """Total saved by one rule across the cart."""

    rule_id: str
    name: str
    savings: int
    items_affected: int


class DiscountResult(BaseModel):
    """Complete discount calculation for a cart."""

    items: list[DiscountedItem]
    original_total: int
    discount_amount: int
    final_total: int
    applied_rules: list[RuleSavings] = Field(default_factory=list)
