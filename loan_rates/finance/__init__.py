"""Decimal loan math: payment formula, annuity equation, Newton solver."""
