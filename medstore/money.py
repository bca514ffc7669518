"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Storefront prices are shown in rupees
CURRENCY_SYMBOL = "₹"

# Highest unit price the storefront accepts (one crore rupees)
MAX_PRICE = Decimal("10000000")

Numeric = Union[str, int, float, Decimal]


def to_decimal(value: Union[Numeric, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Convert via string to avoid float precision issues
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_decimal(value: Numeric) -> Decimal:
    """
    Strict variant of to_decimal for untrusted payloads.

    Raises:
        ValueError: If value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    try:
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def round_money(value: Numeric) -> Decimal:
    """Round monetary value to two decimal places (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Numeric, factor: Numeric) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def format_money(value: Numeric) -> str:
    """Format a price for display, e.g. ``₹1,234.50``."""
    return f"{CURRENCY_SYMBOL}{round_money(value):,.2f}"


__all__ = [
    "MONEY_PRECISION",
    "CURRENCY_SYMBOL",
    "MAX_PRICE",
    "to_decimal",
    "parse_decimal",
    "round_money",
    "multiply",
    "format_money",
]
