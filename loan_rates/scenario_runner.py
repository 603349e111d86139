# loan_rates/scenario_runner.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from loan_rates.config import SolverSettings, settings_from_mapping
from loan_rates.errors import SOLVER_ERRORS
from loan_rates.finance.rates import DEFAULT_GUESS, apr, interest_rate
from loan_rates.validate import (
    resolve_mode,
    load_loans_from_file,
    validate_loans,
)

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "name", "kind", "term", "principal", "annual_rate", "fee",
    "payment", "guess", "rate", "error",
]
INPUT_COLUMNS = [c for c in RESULT_COLUMNS if c not in ("rate", "error")]


def _solve_one(loan: Dict[str, Any], kind: str, settings: SolverSettings) -> str:
    if kind == "apr":
        out = apr(loan["annual_rate"], loan["term"], loan["principal"], loan["fee"], settings=settings)
    else:
        guess = loan.get("guess")
        out = interest_rate(
            loan["payment"], loan["term"], loan["principal"],
            DEFAULT_GUESS if guess is None else guess,
            settings=settings,
        )
    return str(out)


def solve_loans(
    loans: List[Dict[str, Any]],
    kinds: List[str],
    *,
    settings: Optional[SolverSettings] = None,
) -> pd.DataFrame:
    """
    Solve each loan in order. A failing loan gets its error recorded in the
    'error' column; the rest of the batch still runs.
    """
    settings = settings or SolverSettings()
    rows: List[Dict[str, Any]] = []
    for i, (loan, kind) in enumerate(zip(loans, kinds)):
        row: Dict[str, Any] = {c: loan.get(c) for c in INPUT_COLUMNS}
        row["name"] = loan.get("name") or f"loan_{i:03d}"
        row["kind"] = kind
        row["rate"] = None
        row["error"] = None
        try:
            row["rate"] = _solve_one(loan, kind, settings)
        except SOLVER_ERRORS as e:
            logger.warning("%s failed: %s", row["name"], e)
            row["error"] = f"{type(e).__name__}: {e}"
        rows.append(row)
    # object dtype keeps Decimal-derived strings and ints as given
    return pd.DataFrame(rows, columns=RESULT_COLUMNS, dtype=object)


def write_results(df: pd.DataFrame, out: str | Path, *, fmt: str = "csv") -> Path:
    path = Path(out)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "csv":
        df.to_csv(path, index=False)
    elif fmt == "jsonl":
        df.to_json(path, orient="records", lines=True)
    else:
        raise ValueError(f"unknown fmt: {fmt}")
    return path


def run_file(
    config: str | Path,
    out: str | Path | None = None,
    *,
    fmt: str = "csv",
    settings: Optional[SolverSettings] = None,
    mode: str | None = None,
) -> pd.DataFrame:
    """
    Load, validate and solve a scenario file. A 'solver' section in the file
    overrides `settings`. Writes the table to `out` when given.
    """
    if fmt not in ("csv", "jsonl"):
        raise ValueError(f"unknown fmt: {fmt}")
    cfg_path = Path(config)
    data = load_loans_from_file(cfg_path)
    kinds = validate_loans(data, mode=resolve_mode(mode), where=str(cfg_path))

    if isinstance(data.get("solver"), dict):
        settings = settings_from_mapping({"solver": data["solver"]}, settings)

    logger.info("solving %d loans from %s", len(kinds), cfg_path)
    df = solve_loans(data["loans"], kinds, settings=settings)
    if out is not None:
        write_results(df, out, fmt=fmt)
    return df


__all__ = ["RESULT_COLUMNS", "solve_loans", "write_results", "run_file"]
