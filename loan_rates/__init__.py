"""Implied interest rate and APR of level-payment loans."""

from loan_rates.core import apr, interest_rate

__version__ = "1.0.0"
__all__ = ["apr", "interest_rate"]
