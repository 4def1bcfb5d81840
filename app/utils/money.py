"""
Money helpers.

Balances and prices are Decimal with 2 places; every arithmetic step is
rounded ROUND_HALF_UP so repeated operations never accumulate drift.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """Convert a numeric / numeric string to a 2-place Decimal."""
    if isinstance(value, float):
        # через str, чтобы 0.1 не превращался в 0.1000000000000000055
        value = repr(value)
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid money value: {value!r}") from e


def percent_of(amount: MoneyLike, percent: int) -> Decimal:
    """round2(amount * percent / 100)"""
    return to_money(to_money(amount) * Decimal(percent) / Decimal(100))


def format_money(value: MoneyLike) -> str:
    return f"{to_money(value):.2f}"
