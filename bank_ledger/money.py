"""
Amount Handling Module

Decimal helpers for monetary amounts. NEVER uses float for balances:
every incoming value is converted through its string form so that
0.1 stays 0.1.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

AmountLike = Union[Decimal, int, float, str]

ZERO = Decimal('0')
DEFAULT_PRECISION = 2


def to_decimal(value: AmountLike) -> Decimal:
    """Convert a value to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a valid amount")
    return Decimal(str(value))


def parse_amount(value: Optional[AmountLike]) -> Optional[Decimal]:
    """
    Parse an amount leniently.

    Returns None for missing, malformed or non-finite input instead of
    raising, so callers can treat a bad amount like any other rejection.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def round_amount(amount: Decimal, precision: int = DEFAULT_PRECISION) -> Decimal:
    """Round half up to the given number of decimal places"""
    return amount.quantize(Decimal('0.1') ** precision, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, precision: int = DEFAULT_PRECISION) -> str:
    """Format for display"""
    return f"{round_amount(amount, precision):,.{precision}f}"
