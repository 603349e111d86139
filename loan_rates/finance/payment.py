# loan_rates/finance/payment.py
"""
Level-payment helpers used by the APR path:
 - annual_to_month(rate)
 - integer_power(base, exponent)
 - monthly_payment(annual_rate, term, financed_amount)

Rates are nominal annual fractions (0.23 = 23%); payments are monthly.
Everything here is exact Decimal arithmetic.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, Overflow

from loan_rates.errors import UndefinedArithmeticError
from loan_rates.finance.decimals import RATE_PLACES, money_context, round_places

MONTHS_PER_YEAR = 12


def annual_to_month(annual_rate: Decimal) -> Decimal:
    """Nominal annual rate -> periodic (monthly) rate."""
    with money_context():
        return annual_rate / MONTHS_PER_YEAR


def integer_power(base: Decimal, exponent: int) -> Decimal:
    """base**exponent by repeated multiplication (no float round trip)."""
    if exponent < 0:
        raise ValueError("exponent must be >= 0")
    result = Decimal(1)
    try:
        with money_context():
            for _ in range(exponent):
                result = base * result
    except (Overflow, InvalidOperation) as e:
        raise UndefinedArithmeticError(f"overflow raising {base} to {exponent}") from e
    return result


def _payment_denominator(periodic_rate: Decimal, term: int) -> Decimal:
    # 1 - (1+r)^-n, with the negative power taken as 1 / (1+r)^n
    with money_context():
        return 1 - Decimal(1) / integer_power(periodic_rate + 1, term)


def monthly_payment(annual_rate: Decimal, term: int, financed_amount: Decimal) -> Decimal:
    """
    Level monthly payment of a fully amortizing loan:
        A = r * P / (1 - (1+r)^-n),   r = annual_rate / 12
    Rounded to 6 fractional digits. A zero rate has no level-payment
    solution in this form and raises UndefinedArithmeticError.
    """
    periodic = annual_to_month(annual_rate)
    denominator = _payment_denominator(periodic, term)
    if denominator == 0:
        raise UndefinedArithmeticError("rate too small / division by zero")
    with money_context():
        payment = periodic * financed_amount / denominator
        return round_places(payment, RATE_PLACES)


__all__ = ["MONTHS_PER_YEAR", "annual_to_month", "integer_power", "monthly_payment"]
