# loan_rates/finance/rates.py
"""
APR and implied interest rate of a level-payment loan.

Both entry points reduce the loan to ratio = payment / principal and hand it
to the Newton solver in finance.solver. Inputs are validated before any
arithmetic runs; results are Decimals with 6 fractional digits.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from loan_rates.config import SolverSettings
from loan_rates.finance.decimals import Number, money_context
from loan_rates.finance.payment import monthly_payment
from loan_rates.finance.solver import solve
from loan_rates.validate import (
    coerce_decimal,
    require_non_negative,
    require_positive,
    require_term,
)

DEFAULT_GUESS = Decimal("10.0")


def ratio(payment: Decimal, principal: Decimal) -> Decimal:
    with money_context():
        return payment / principal


def apr(
    annual_rate: Number,
    term: int,
    principal: Number,
    fee: Number,
    *,
    settings: Optional[SolverSettings] = None,
) -> Decimal:
    """
    APR of a loan whose fee is financed on top of the principal.

    The level payment on principal + fee at `annual_rate` is computed first,
    then the rate that produces that payment on `principal` alone is solved
    for, seeding Newton with `annual_rate`.

    >>> apr(Decimal("0.23"), 24, Decimal("2342"), Decimal("20"))
    Decimal('0.238987')
    """
    term = require_term(term)
    principal = require_positive("principal", principal)
    fee = require_non_negative("fee", fee)
    annual_rate = require_non_negative("annual_rate", annual_rate)

    with money_context():
        total = principal + fee
    payment = monthly_payment(annual_rate, term, total)
    return solve(ratio(payment, principal), term, annual_rate, settings=settings)


def interest_rate(
    payment: Number,
    term: int,
    principal: Number,
    guess: Number = DEFAULT_GUESS,
    *,
    settings: Optional[SolverSettings] = None,
) -> Decimal:
    """
    Nominal annual rate implied by a level monthly payment. `guess` is an
    annual rate used only to seed the iteration.

    >>> interest_rate(Decimal("450.00"), 72, Decimal("24000"))
    Decimal('0.104430')
    """
    payment = require_positive("payment", payment)
    term = require_term(term)
    principal = require_positive("principal", principal)
    guess = coerce_decimal("guess", guess)

    return solve(ratio(payment, principal), term, guess, settings=settings)


__all__ = ["DEFAULT_GUESS", "ratio", "apr", "interest_rate"]
