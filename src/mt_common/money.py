"""Monetary rounding for JOD amounts.

Amounts arrive as int/float from the document store. All arithmetic goes
through Decimal so 2-decimal rounding is half-up, not banker's rounding.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def is_valid_amount(value: object) -> bool:
    """True for a finite, non-negative int/float (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def round_money(value: float | Decimal) -> float:
    """Round to 2 decimal places, half-up: 1.005 -> 1.01."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_display(amount: float) -> str:
    """Format for operators: 1234.5 -> 'JOD 1,234.50', -3 -> '-JOD 3.00'."""
    rounded = round_money(abs(amount))
    sign = "-" if amount < 0 else ""
    return f"{sign}JOD {rounded:,.2f}"
