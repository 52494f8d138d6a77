"""Monetary helpers - every amount is a Decimal with two places"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

# Largest amount a DECIMAL(15, 2) column holds
MAX_AMOUNT = Decimal("9999999999999.99")


def to_money(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Convert to a two-place Decimal (floats go through str to avoid binary noise)"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
