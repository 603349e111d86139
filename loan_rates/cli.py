# loan_rates/cli.py
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from loan_rates.config import load_solver_settings
from loan_rates.errors import ConfigError, InvalidArgumentError, LoanRatesError
from loan_rates.finance.rates import DEFAULT_GUESS, apr, interest_rate


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="loan_rates",
        description="Implied interest rate / APR of level-payment loans",
    )
    p.add_argument(
        "--config",
        default=None,
        help="YAML file with solver settings (max_iterations, timeout, exponentiation).",
    )
    p.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Override the Newton iteration cap.",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("apr", help="APR of a loan with a financed fee.")
    a.add_argument("--annual-rate", required=True, help="Nominal annual rate, e.g. 0.23")
    a.add_argument("--term", type=int, required=True, help="Number of monthly payments.")
    a.add_argument("--principal", required=True)
    a.add_argument("--fee", default="0")

    r = sub.add_parser("rate", help="Rate implied by a level monthly payment.")
    r.add_argument("--payment", required=True)
    r.add_argument("--term", type=int, required=True, help="Number of monthly payments.")
    r.add_argument("--principal", required=True)
    r.add_argument("--guess", default=str(DEFAULT_GUESS), help="Annual rate seed (default: 10.0).")

    b = sub.add_parser("batch", help="Solve every loan in a YAML/JSON scenario file.")
    b.add_argument("file")
    b.add_argument("--out", default=None, help="Write results here instead of stdout.")
    b.add_argument("--format", dest="fmt", default="csv", choices=["csv", "jsonl"])

    v = sub.add_parser("validate", help="Validate scenario files or directories.")
    v.add_argument("paths", nargs="+")
    m = v.add_mutually_exclusive_group()
    m.add_argument("--strict", action="store_true", help="Require 'kind', reject unknown keys.")
    m.add_argument("--relaxed", action="store_true", help="Infer 'kind' from the fields present.")
    return p


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _run(ns: argparse.Namespace) -> int:
    settings = load_solver_settings(ns.config)
    if ns.max_iterations is not None:
        settings = replace(settings, max_iterations=ns.max_iterations)

    if ns.command == "apr":
        print(apr(ns.annual_rate, ns.term, ns.principal, ns.fee, settings=settings))
        return 0

    if ns.command == "rate":
        print(interest_rate(ns.payment, ns.term, ns.principal, ns.guess, settings=settings))
        return 0

    if ns.command == "batch":
        # heavy imports (pandas) stay behind the batch command
        from loan_rates.scenario_runner import run_file

        df = run_file(Path(ns.file), ns.out, fmt=ns.fmt, settings=settings)
        if ns.out is None:
            if ns.fmt == "jsonl":
                sys.stdout.write(df.to_json(orient="records", lines=True))
            else:
                sys.stdout.write(df.to_csv(index=False))
        return 1 if df["error"].notna().any() else 0

    if ns.command == "validate":
        from loan_rates.validate import validate_paths

        mode = "strict" if ns.strict else "relaxed" if ns.relaxed else None
        return validate_paths(ns.paths, mode=mode)

    return 2


def main(argv: list[str] | None = None) -> int:
    ns = parse_args(argv)
    logging.basicConfig(level=getattr(logging, ns.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        return _run(ns)
    except (InvalidArgumentError, ConfigError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except LoanRatesError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


__all__ = ["main", "parse_args"]
