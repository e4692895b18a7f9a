"""Money helpers.

Every amount inside the model is an integer number of cents. Conversion
to and from dollars happens only at the edges (shell input, MCP tools,
rendered reports).
"""

import math
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[int, float, Decimal]


def normalize_amount(value) -> int:
    """Coerce a cents amount to an integer.

    Fractional cents are rounded half-up. Booleans, strings and other
    non-numeric values are rejected.

    Raises:
        TypeError: if the value is not a number
        ValueError: if the value is NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise TypeError(f"Amount must be a number of cents, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Amount must be finite, got {value!r}")
    try:
        return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ValueError(f"Amount must be finite, got {value!r}") from exc


def to_cents(dollars: Number) -> int:
    """Convert a dollar amount (e.g. 12.34) to integer cents (1234)."""
    if isinstance(dollars, bool) or not isinstance(dollars, (int, float, Decimal)):
        raise TypeError(f"Dollar amount must be a number, got {dollars!r}")
    if isinstance(dollars, float) and not math.isfinite(dollars):
        raise ValueError(f"Dollar amount must be finite, got {dollars!r}")
    return normalize_amount(Decimal(str(dollars)) * 100)


def parse_dollars(text: str) -> int:
    """Parse user-typed dollars ("$1,250.50", "-300", "+6000") into cents."""
    cleaned = text.strip().replace(',', '').replace('$', '')
    if not cleaned:
        raise ValueError("Empty amount")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount '{text}'") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid amount '{text}'")
    return normalize_amount(amount * 100)


def from_cents(cents: int) -> float:
    """Convert integer cents to dollars for display or JSON output."""
    return round(cents / 100, 2)


def format_currency(cents: int) -> str:
    """Format cents as a dollar string, e.g. -5000 -> '-$50.00'."""
    sign = '-' if cents < 0 else ''
    return f"{sign}${abs(cents) / 100:,.2f}"
