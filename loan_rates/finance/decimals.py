# loan_rates/finance/decimals.py
"""
Decimal arithmetic context shared by the finance modules.

All arithmetic runs with 28 significant digits and half-away-from-zero
rounding. Callers enter `money_context()` instead of touching the thread's
default context, so concurrent solves never interfere.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext
from typing import Union

Number = Union[Decimal, int, float, str]

PRECISION = 28
RATE_PLACES = 6

_CONTEXT = Context(prec=PRECISION, rounding=ROUND_HALF_UP)


def money_context():
    """Context manager installing the solver's arithmetic context."""
    return localcontext(_CONTEXT)


def to_decimal(value: Number) -> Decimal:
    """
    Convert a plain number to Decimal.
    Floats go through their shortest repr, so 0.23 becomes Decimal("0.23")
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers here")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"non-finite float: {value!r}")
        return Decimal(repr(value))
    if isinstance(value, str):
        return Decimal(value.strip())
    raise TypeError(f"cannot convert {type(value).__name__} to Decimal")


def round_places(value: Decimal, places: int) -> Decimal:
    """Round half away from zero to exactly `places` fractional digits."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


__all__ = ["Number", "PRECISION", "RATE_PLACES", "money_context", "to_decimal", "round_places"]
