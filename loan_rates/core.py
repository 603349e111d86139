# loan_rates/core.py
"""
Public rates façade.

Design:
- The math lives only in loan_rates.finance (payment, annuity, solver, rates).
- This module must not *define* apr/interest_rate; it re-exports them so
  callers have one stable import path.
"""
from loan_rates.finance.rates import apr as apr, interest_rate as interest_rate  # re-exports only

__all__ = ["apr", "interest_rate"]
