import json

import pandas as pd
import pytest

from loan_rates.config import SolverSettings
from loan_rates.errors import ConfigError
from loan_rates.scenario_runner import RESULT_COLUMNS, run_file, solve_loans

SCENARIO = """\
loans:
  - {name: used_car, kind: rate, payment: 300.00, term: 60, principal: 10000}
  - {kind: rate, payment: 450.00, term: 72, principal: 25000}
  - {name: with_fee, kind: apr, annual_rate: 0.23, term: 24, principal: 2342, fee: 20}
  - {name: free_money, kind: apr, annual_rate: 0, term: 24, principal: 2342, fee: 20}
"""


def _write(tmp_path, text=SCENARIO, name="loans.yaml"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return p


def test_run_file_solves_each_loan(tmp_path):
    df = run_file(_write(tmp_path))
    assert list(df.columns) == RESULT_COLUMNS
    assert list(df["rate"][:3]) == ["0.261005", "0.089485", "0.238987"]
    assert df["name"][1] == "loan_001"


def test_failing_loan_does_not_abort_batch(tmp_path):
    df = run_file(_write(tmp_path))
    last = df.iloc[3]
    assert pd.isna(last["rate"])
    assert last["error"].startswith("UndefinedArithmeticError")
    assert df["error"][:3].isna().all()


def test_solver_section_overrides_settings(tmp_path):
    p = _write(tmp_path, "solver: {max_iterations: 0}\n" + SCENARIO)
    df = run_file(p, settings=SolverSettings(max_iterations=50))
    assert df["error"][:3].str.startswith("ConvergenceError").all()


def test_writes_csv(tmp_path):
    out = tmp_path / "out" / "results.csv"
    run_file(_write(tmp_path), out, fmt="csv")
    text = out.read_text(encoding="utf-8")
    assert text.splitlines()[0] == ",".join(RESULT_COLUMNS)
    assert "0.261005" in text


def test_writes_jsonl(tmp_path):
    out = tmp_path / "results.jsonl"
    run_file(_write(tmp_path), out, fmt="jsonl")
    rows = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert len(rows) == 4
    assert rows[2]["rate"] == "0.238987"


def test_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        run_file(_write(tmp_path), tmp_path / "x.txt", fmt="xlsx")


def test_invalid_file_is_rejected_before_solving(tmp_path):
    p = _write(tmp_path, "- {kind: rate, payment: -1, term: 60, principal: 10000}\n")
    with pytest.raises(ConfigError):
        run_file(p)


def test_solve_loans_in_memory():
    df = solve_loans([{"payment": "450.00", "term": 72, "principal": "24000"}], ["rate"])
    assert df["rate"][0] == "0.104430"


def test_exact_mode_overflow_is_recorded_per_loan(tmp_path):
    p = _write(tmp_path, """\
loans:
  - {name: runaway, kind: rate, payment: 1101, term: 600, principal: 74607, guess: -11.99}
  - {name: used_car, kind: rate, payment: 300.00, term: 60, principal: 10000}
""")
    df = run_file(p, settings=SolverSettings(exponentiation="exact"))
    assert df["error"][0].startswith("UndefinedArithmeticError")
    assert pd.isna(df["error"][1])
    assert abs(float(df["rate"][1]) - 0.261005) <= 2e-6


def test_input_rate_and_error_columns_are_not_carried_over():
    loan = {"payment": "450.00", "term": 72, "principal": "24000", "rate": "0.5", "error": "stale"}
    df = solve_loans([loan], ["rate"])
    assert df["rate"][0] == "0.104430"
    assert pd.isna(df["error"][0])
