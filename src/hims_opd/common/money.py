from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce DB/driver values (Decimal, int, float, None) to a 2-place Decimal."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return to_money(Decimal(amount) * Decimal(percent) / Decimal(100))


def money_sum(values: Iterable[Any]) -> Decimal:
    return to_money(sum((to_money(v) for v in values), ZERO))
