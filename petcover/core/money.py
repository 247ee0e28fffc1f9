"""
Money helpers.

All engine amounts are integer minor units (cents). Decimal values only
appear at the edges: authoring input and display output.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENTS_PER_UNIT = 100
TWO_PLACES = Decimal("0.01")

DecimalLike = Union[Decimal, int, str]


def to_decimal(cents: int) -> Decimal:
    """
    Convert minor units to a two-place Decimal for display.

    Args:
        cents: Amount in minor units

    Returns:
        Decimal amount, e.g. 8000 -> Decimal("80.00")
    """
    if isinstance(cents, bool) or not isinstance(cents, int):
        raise TypeError(f"Money must be integer minor units, got {type(cents).__name__}")
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(TWO_PLACES)


def from_decimal(value: DecimalLike) -> int:
    """
    Convert a decimal amount (e.g. "80.00") to integer minor units.

    Floats are refused: they are the rounding drift this module exists to avoid.
    """
    if isinstance(value, float):
        raise TypeError("Refusing float money value; pass Decimal or str")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid money value: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid money value: {value!r}")
    return int((amount * CENTS_PER_UNIT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage_of(cents: int, percentage: DecimalLike) -> int:
    """
    Apply a 0-100 percentage to an amount, rounding half up to whole cents.

    >>> percentage_of(15000, Decimal("10.00"))
    1500
    """
    if isinstance(percentage, float):
        raise TypeError("Refusing float percentage; pass Decimal or str")
    pct = Decimal(percentage)
    if pct < 0 or pct > 100:
        raise ValueError(f"Percentage out of range 0-100: {pct}")
    return int((Decimal(cents) * pct / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_money(cents: int, currency: str = "BRL") -> str:
    """Render an amount for logs and operator messages, e.g. 'BRL 80.00'."""
    return f"{currency} {to_decimal(cents):,.2f}"
