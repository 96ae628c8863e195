"""Integer money arithmetic in pence.

Amounts never pass through floats. Rounding is half-up so 0.5p rounds away
from zero, matching how the business has always quoted refunds.
"""

from decimal import ROUND_HALF_UP, Decimal


def percentage_of(amount: int, percentage: int | Decimal) -> int:
    """Return ``percentage`` percent of ``amount``, rounded half-up to whole pence."""
    value = Decimal(amount) * Decimal(percentage) / Decimal("100")
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def divide(amount: int, parts: int) -> int:
    """Split ``amount`` into ``parts`` equal shares, rounded half-up."""
    value = Decimal(amount) / Decimal(parts)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
