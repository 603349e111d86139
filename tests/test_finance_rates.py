from decimal import Decimal

import pytest

from loan_rates.config import SolverSettings
from loan_rates.errors import InvalidArgumentError, UndefinedArithmeticError
from loan_rates.finance import rates
from loan_rates.finance.rates import apr, interest_rate


def test_interest_rate_known_loans():
    assert interest_rate(Decimal("300.00"), 60, Decimal("10000")) == Decimal("0.261005")
    assert interest_rate(Decimal("450.00"), 72, Decimal("25000")) == Decimal("0.089485")


def test_interest_rate_default_guess():
    assert interest_rate(Decimal("450.00"), 72, Decimal("24000")) == Decimal("0.104430")


def test_apr_known_loan():
    assert apr(Decimal("0.23"), 24, Decimal("2342"), Decimal("20")) == Decimal("0.238987")


def test_long_term_loans_from_default_guess():
    assert interest_rate(Decimal("1199.10"), 360, Decimal("200000")) == Decimal("0.060000")
    out = interest_rate(Decimal("1687.71"), 180, Decimal("200000"))
    assert abs(out - Decimal("0.06")) <= Decimal("0.00001")


def test_long_term_apr():
    out = apr(Decimal("0.06"), 360, Decimal("200000"), Decimal("0"))
    assert abs(out - Decimal("0.06")) <= Decimal("0.000002")


def test_plain_numbers_are_accepted():
    # floats go through their shortest repr, like Decimal("0.23")
    assert apr(0.23, 24, 2342, 20) == Decimal("0.238987")
    assert interest_rate(300.0, 60, 10000) == Decimal("0.261005")
    assert interest_rate("450.00", 72, "24000", "10.0") == Decimal("0.104430")


def test_result_has_six_fractional_digits():
    out = interest_rate(Decimal("450.00"), 72, Decimal("24000"))
    assert out.as_tuple().exponent == -6
    assert str(out) == "0.104430"


def test_deterministic():
    a = apr(Decimal("0.23"), 24, Decimal("2342"), Decimal("20"))
    b = apr(Decimal("0.23"), 24, Decimal("2342"), Decimal("20"))
    assert a == b and str(a) == str(b)


def test_apr_with_zero_fee_recovers_annual_rate():
    for annual in ("0.05", "0.12", "0.23"):
        out = apr(Decimal(annual), 36, Decimal("15000"), Decimal("0"))
        assert abs(out - Decimal(annual)) <= Decimal("0.000002")


def test_apr_never_decreases_as_fee_grows():
    fees = ["0", "10", "50", "200", "1000"]
    out = [apr(Decimal("0.09"), 48, Decimal("20000"), Decimal(f)) for f in fees]
    assert out == sorted(out)
    assert out[-1] > out[0]


def test_single_period_matches_direct_solution():
    # one payment: payment = principal * (1 + i)  =>  annual = 12 * i
    out = interest_rate(Decimal("101"), 1, Decimal("100"))
    assert abs(out - Decimal("0.12")) <= Decimal("0.000001")

    out = apr(Decimal("0.12"), 1, Decimal("100"), Decimal("0"))
    assert abs(out - Decimal("0.12")) <= Decimal("0.000001")


def test_zero_nominal_rate_in_apr_is_undefined():
    with pytest.raises(UndefinedArithmeticError, match="division by zero"):
        apr(Decimal("0"), 24, Decimal("2342"), Decimal("20"))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"principal": Decimal("0")},
        {"principal": Decimal("-100")},
        {"fee": Decimal("-1")},
        {"term": 0},
        {"term": -12},
        {"term": 12.0},
        {"term": True},
        {"annual_rate": Decimal("-0.01")},
        {"principal": "abc"},
        {"fee": None},
        {"annual_rate": float("nan")},
    ],
)
def test_apr_rejects_invalid_arguments_before_arithmetic(monkeypatch, kwargs):
    def boom(*a, **k):
        raise AssertionError("arithmetic ran before validation")

    monkeypatch.setattr(rates, "monthly_payment", boom)
    monkeypatch.setattr(rates, "solve", boom)
    args = {"annual_rate": Decimal("0.1"), "term": 12, "principal": Decimal("1000"), "fee": Decimal("10")}
    args.update(kwargs)
    with pytest.raises(InvalidArgumentError):
        apr(**args)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"payment": Decimal("0")},
        {"payment": Decimal("-5")},
        {"principal": Decimal("0")},
        {"term": 0},
        {"term": "60"},
        {"guess": "ten"},
    ],
)
def test_interest_rate_rejects_invalid_arguments_before_arithmetic(monkeypatch, kwargs):
    def boom(*a, **k):
        raise AssertionError("arithmetic ran before validation")

    monkeypatch.setattr(rates, "solve", boom)
    args = {"payment": Decimal("300"), "term": 60, "principal": Decimal("10000")}
    args.update(kwargs)
    with pytest.raises(InvalidArgumentError):
        interest_rate(**args)


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        interest_rate(Decimal("300"), 60, Decimal("-1"))


def test_exact_mode_overflow_is_undefined_arithmetic():
    # a negative guess starts the iterate near zero and the next step overshoots
    with pytest.raises(UndefinedArithmeticError):
        interest_rate(
            Decimal("1101"), 600, Decimal("74607"), Decimal("-11.99"),
            settings=SolverSettings(exponentiation="exact"),
        )
