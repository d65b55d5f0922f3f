"""Fixed-precision helpers for money and rate values."""

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Iterable

ZERO = Decimal("0")
CENT = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round a rate to four decimal places, half-up."""
    return Decimal(value).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)


def ceil_whole(value: Decimal) -> Decimal:
    """Smallest whole number not less than value."""
    return Decimal(value).to_integral_value(rounding=ROUND_CEILING)


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, starting from Decimal zero rather than int 0."""
    return sum(amounts, ZERO)


def format_currency(value: Decimal) -> str:
    """Format an amount for human-readable descriptions, e.g. $1,234.50."""
    return f"${round_money(value):,.2f}"
