# loan_rates/finance/annuity.py
"""
The annuity root equation in k = 1 + periodic_rate:

    f(k)  = k^(n+1) - (r+1)·k^n + r
    f'(k) = (n+1)·k^n - n·(r+1)·k^(n-1)

with r = payment / principal and n = term. The root above 1 is the rate
consistent with the level payment.

Powers are taken one of two ways:
  "float" (default)  Decimal -> float -> math.pow -> Decimal(repr(...)).
                     Keeps published rates such as 0.261005 stable.
  "exact"            repeated Decimal multiplication.
"""

from __future__ import annotations

import math
from decimal import Decimal

from loan_rates.errors import UndefinedArithmeticError
from loan_rates.finance.decimals import money_context
from loan_rates.finance.payment import integer_power


def float_power(base: Decimal, exponent: int) -> Decimal:
    """base**exponent through a binary float round trip."""
    try:
        value = math.pow(float(base), float(exponent))
    except OverflowError as e:
        raise UndefinedArithmeticError(f"overflow raising {base} to {exponent}") from e
    if not math.isfinite(value):
        raise UndefinedArithmeticError(f"non-finite power of {base} to {exponent}")
    return Decimal(repr(value))


def power(base: Decimal, exponent: int, mode: str = "float") -> Decimal:
    if mode == "float":
        return float_power(base, exponent)
    if mode == "exact":
        return integer_power(base, exponent)
    raise ValueError(f"unknown exponentiation mode: {mode!r}")


def f(k: Decimal, ratio: Decimal, term: int, mode: str = "float") -> Decimal:
    """The equation being solved."""
    first = power(k, term + 1, mode)
    second = power(k, term, mode)
    with money_context():
        third = second * (ratio + 1)
        return first - third + ratio


def df(k: Decimal, ratio: Decimal, term: int, mode: str = "float") -> Decimal:
    """df/dk, needed for the Newton step."""
    with money_context():
        first = power(k, term, mode) * (term + 1)
        second = (ratio + 1) * term
        third = second * power(k, term - 1, mode)
        return first - third


__all__ = ["float_power", "power", "f", "df"]
