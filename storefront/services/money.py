"""
Money Utilities - Safe Decimal operations for monetary values.

Prices arrive from the backend as JSON numbers; they are converted to
Decimal on the way in and back to float only when a request body is built.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal, None]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def to_decimal(value: Number) -> Decimal:
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
        # Go through str so 0.1 stays 0.1
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def format_money(value: Number, currency: str = "INR") -> str:
    """Format monetary value with currency symbol, e.g. ``₹1,234.50``."""
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    return f"{symbol}{round_money(value):,.2f}"


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def divide(value: Number, divisor: Number) -> Decimal:
    """Safe division of monetary value."""
    d = to_decimal(divisor)
    if d == 0:
        return Decimal("0")
    return to_decimal(value) / d


def percent(value: Number, percent_value: Number) -> Decimal:
    """Calculate percentage of a monetary value."""
    return multiply(value, divide(percent_value, 100))


def compare(a: Number, b: Number) -> int:
    """
    Compare two monetary values.

    Returns:
        -1 if a < b, 0 if a == b, 1 if a > b
    """
    diff = to_decimal(a) - to_decimal(b)
    if diff < 0:
        return -1
    elif diff > 0:
        return 1
    return 0
