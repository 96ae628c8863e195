"""API models for discount endpoints."""

from pydantic import ConfigDict, Field

from coaching_core.models import DiscountCartItem, DiscountRule

from .common import ClockedRequest


class DiscountCalculateRequest(ClockedRequest):
    """A cart plus the discount rules to apply to it."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "items": [
                        {"item_id": "i1", "child_id": "c1", "parent_id": "p1", "base_price": 1000},
                        {"item_id": "i2", "child_id": "c2", "parent_id": "p1", "base_price": 1000},
                    ],
                    "rules": [
                        {
                            "rule_id": "sibling",
                            "name": "Sibling discount",
                            "type": "sibling",
                            "conditions": {"min_children": 2},
                            "discount": {"type": "percentage", "value": 10, "applies_to": "additional"},
                            "priority": 1,
                        }
                    ],
                }
            ]
        },
    )

    items: list[DiscountCartItem] = Field(..., description="Cart items in the order they were added")
    rules: list[DiscountRule] = Field(default_factory=list)
