"""Decimal coercion shared by the calculators."""

from decimal import Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


def as_decimal(value: Optional[Number]) -> Decimal:
    """
    Convert a caller-supplied amount to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1. ``None`` reads as zero,
    which is how empty form fields arrive.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def clamp(value: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    return max(lower, min(upper, value))
