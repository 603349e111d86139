# loan_rates/errors.py
"""
Typed errors raised by the rate solver.

Exports
-------
- LoanRatesError            (base)
- InvalidArgumentError      rejected before any arithmetic runs
- UndefinedArithmeticError  zero denominators, zero derivative, float overflow
- ConvergenceError          Newton iteration ran out of budget
- ConfigError               bad solver settings or scenario file
- SOLVER_ERRORS             tuple for grouped handling
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional


class LoanRatesError(Exception):
    """Base class for rate-solver failures."""


class InvalidArgumentError(LoanRatesError, ValueError):
    """An input is out of its domain (non-positive principal, negative fee, ...)."""


class UndefinedArithmeticError(LoanRatesError, ArithmeticError):
    """A division by zero or an overflow that would otherwise yield inf/NaN."""


class ConvergenceError(LoanRatesError, RuntimeError):
    """The iteration budget was exhausted before successive iterates agreed."""

    def __init__(self, message: str, *, iterations: int = 0, last_k: Optional[Decimal] = None) -> None:
        super().__init__(message)
        self.iterations = iterations
        self.last_k = last_k


class ConfigError(LoanRatesError, ValueError):
    """Solver settings or a scenario file could not be understood."""


# Errors a single solve can raise once its inputs are accepted
SOLVER_ERRORS = (
    InvalidArgumentError,
    UndefinedArithmeticError,
    ConvergenceError,
)

__all__ = [
    "LoanRatesError",
    "InvalidArgumentError",
    "UndefinedArithmeticError",
    "ConvergenceError",
    "ConfigError",
    "SOLVER_ERRORS",
]
