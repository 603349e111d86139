# loan_rates/finance/solver.py
"""
Newton-Raphson on the annuity equation.

The iterate is k = 1 + periodic_rate. Two successive iterates are considered
converged when round((k - 1) * 100000) agrees, i.e. the periodic rate they
imply matches to 5 decimal places. The step divides by |f'(k)|.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow
from typing import Optional

from loan_rates.config import SolverSettings
from loan_rates.errors import ConvergenceError, UndefinedArithmeticError
from loan_rates.finance import annuity
from loan_rates.finance.decimals import RATE_PLACES, money_context, round_places
from loan_rates.finance.payment import MONTHS_PER_YEAR

logger = logging.getLogger(__name__)

CONVERGENCE_SCALE = Decimal(100_000)


@dataclass(frozen=True)
class SolveResult:
    rate: Decimal
    k: Decimal
    iterations: int


def _scaled(k: Decimal) -> Decimal:
    # integral rounding has no precision cap, unlike quantize
    return ((k - 1) * CONVERGENCE_SCALE).to_integral_value(rounding=ROUND_HALF_UP)


def newton_raphson(
    start: Decimal,
    ratio: Decimal,
    term: int,
    settings: SolverSettings,
) -> tuple[Decimal, int]:
    """
    Iterate from `start` until two successive iterates agree at the
    convergence scale. Returns (k, iterations).
    """
    mode = settings.exponentiation
    deadline = None if settings.timeout is None else time.monotonic() + settings.timeout

    k = Decimal("0.0")
    k_next = start
    with money_context():
        for i in range(settings.max_iterations + 1):
            if _scaled(k) == _scaled(k_next):
                logger.debug("converged after %d iterations: k=%s", i, k_next)
                return k_next, i
            if i == settings.max_iterations:
                break
            if deadline is not None and time.monotonic() > deadline:
                raise ConvergenceError(
                    f"timed out after {i} iterations ({settings.timeout}s budget)",
                    iterations=i,
                    last_k=k_next,
                )

            try:
                value = annuity.f(k_next, ratio, term, mode)
                slope = abs(annuity.df(k_next, ratio, term, mode))
                if slope == 0:
                    raise UndefinedArithmeticError(f"zero derivative at k={k_next}")
                k, k_next = k_next, k_next - value / slope
            except (Overflow, InvalidOperation) as e:
                raise UndefinedArithmeticError(f"iterate left the decimal range at k={k_next}") from e
            logger.debug("iteration %d: k=%s", i + 1, k_next)

    raise ConvergenceError(
        f"no convergence within {settings.max_iterations} iterations",
        iterations=settings.max_iterations,
        last_k=k_next,
    )


def solve_detailed(
    ratio: Decimal,
    term: int,
    guess: Decimal,
    *,
    settings: Optional[SolverSettings] = None,
) -> SolveResult:
    """Solve for the annual nominal rate and report the final iterate."""
    settings = settings or SolverSettings()
    with money_context():
        start = guess / MONTHS_PER_YEAR + 1
    k, iterations = newton_raphson(start, ratio, term, settings)
    with money_context():
        rate = round_places((k - 1) * MONTHS_PER_YEAR, RATE_PLACES)
    return SolveResult(rate=rate, k=k, iterations=iterations)


def solve(
    ratio: Decimal,
    term: int,
    guess: Decimal,
    *,
    settings: Optional[SolverSettings] = None,
) -> Decimal:
    """Annual nominal rate (6 fractional digits) whose level payment gives `ratio`."""
    return solve_detailed(ratio, term, guess, settings=settings).rate


__all__ = ["CONVERGENCE_SCALE", "SolveResult", "newton_raphson", "solve_detailed", "solve"]
