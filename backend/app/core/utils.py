"""
Utility functions for the application.
"""
from typing import Union
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Coerce a number to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a number: {value!r}")


def round_money(value: Number, places: int = 2) -> Decimal:
    """Round half-up to a fixed number of decimal places."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def round_percent(value: Number) -> int:
    """Round a percentage to the nearest integer, halves going up."""
    return int(to_decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_currency(amount: Number, currency: str = "USD") -> str:
    """Format an amount for display: US$1,234.50 or $1,235."""
    if getattr(currency, "value", currency) == "USD":
        return f"US${round_money(amount, 2):,.2f}"
    return f"${round_money(amount, 0):,.0f}"
