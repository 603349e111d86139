# loan_rates/validate.py
from __future__ import annotations

import json
import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, List

import yaml

from loan_rates.errors import ConfigError, InvalidArgumentError
from loan_rates.finance.decimals import Number, to_decimal

# Required fields per loan kind; optional fields listed separately
LOAN_FIELDS: Dict[str, Dict[str, tuple]] = {
    "apr": {"required": ("annual_rate", "term", "principal", "fee"), "optional": ()},
    "rate": {"required": ("payment", "term", "principal"), "optional": ("guess",)},
}
COMMON_KEYS = {"kind", "name"}


# ---------- argument guards ----------
def coerce_decimal(name: str, value: Number) -> Decimal:
    try:
        d = to_decimal(value)
    except (TypeError, ValueError, InvalidOperation) as e:
        raise InvalidArgumentError(f"{name} must be a decimal number, got {value!r}") from e
    if not d.is_finite():
        raise InvalidArgumentError(f"{name} must be finite, got {value!r}")
    return d


def require_positive(name: str, value: Number) -> Decimal:
    d = coerce_decimal(name, value)
    if d <= 0:
        raise InvalidArgumentError(f"{name} must be > 0, got {d}")
    return d


def require_non_negative(name: str, value: Number) -> Decimal:
    d = coerce_decimal(name, value)
    if d < 0:
        raise InvalidArgumentError(f"{name} must be >= 0, got {d}")
    return d


def require_term(term: Any) -> int:
    if isinstance(term, bool) or not isinstance(term, int):
        raise InvalidArgumentError(f"term must be a positive integer, got {term!r}")
    if term <= 0:
        raise InvalidArgumentError(f"term must be a positive integer, got {term}")
    return term


# ---------- scenario files ----------
def resolve_mode(flag: str | None) -> str:
    if flag in ("strict", "relaxed"):
        return flag
    env = (os.environ.get("VALIDATION_MODE") or "").lower()
    return env if env in ("strict", "relaxed") else "relaxed"


def infer_kind(data: Dict[str, Any]) -> str | None:
    kind = data.get("kind")
    if kind is not None:
        return str(kind).lower()
    if "annual_rate" in data:
        return "apr"
    if "payment" in data:
        return "rate"
    return None


def validate_loan_dict(data: Dict[str, Any], *, mode: str = "relaxed", where: str = "<mem>") -> str:
    """
    Guardrails for one loan entry; returns its kind.
      relaxed: kind may be inferred from the fields present
      strict : kind is required and unknown keys are rejected
    Field values are range-checked the same way in both modes.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: loan entry must be a mapping")
    if mode == "strict" and "kind" not in data:
        raise ConfigError(f"{where}: missing required key 'kind' (strict mode)")

    kind = infer_kind(data)
    if kind not in LOAN_FIELDS:
        raise ConfigError(f"{where}: kind must be one of {sorted(LOAN_FIELDS)}, got {kind!r}")

    spec = LOAN_FIELDS[kind]
    missing = [k for k in spec["required"] if k not in data]
    if missing:
        raise ConfigError(f"{where}: missing required keys: {missing}")

    if mode == "strict":
        allowed = COMMON_KEYS | set(spec["required"]) | set(spec["optional"])
        unknown = sorted(k for k in data if k not in allowed)
        if unknown:
            raise ConfigError(f"{where}: unknown keys (strict mode): {unknown}")

    try:
        require_term(data["term"])
        require_positive("principal", data["principal"])
        if kind == "apr":
            require_non_negative("annual_rate", data["annual_rate"])
            require_non_negative("fee", data["fee"])
        else:
            require_positive("payment", data["payment"])
            if data.get("guess") is not None:
                coerce_decimal("guess", data["guess"])
    except InvalidArgumentError as e:
        raise ConfigError(f"{where}: {e}") from e
    return kind


def load_loans_from_file(path: str | Path) -> Dict[str, Any]:
    """
    Read a scenario file (YAML or JSON). Accepts a bare list of loans or a
    mapping with 'loans' (and optionally 'solver'). Returns the mapping form.
    """
    p = Path(path)
    if p.is_dir():
        raise ConfigError(f"{p} is a directory (expected a file)")
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {p}: {e}") from e
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text or "null")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"{p}: cannot parse: {e}") from e

    if data is None:
        data = {"loans": []}
    if isinstance(data, list):
        data = {"loans": data}
    if not isinstance(data, dict) or not isinstance(data.get("loans", []), list):
        raise ConfigError(f"{p}: expected a list of loans or a mapping with 'loans'")
    data.setdefault("loans", [])
    return data


def validate_loans(data: Dict[str, Any], *, mode: str = "relaxed", where: str = "<mem>") -> List[str]:
    """Validate every entry; returns the kinds in order."""
    if mode == "strict":
        unknown = sorted(k for k in data if k not in ("loans", "solver"))
        if unknown:
            raise ConfigError(f"{where}: unknown top-level keys (strict mode): {unknown}")
    return [
        validate_loan_dict(loan, mode=mode, where=f"{where}[{i}]")
        for i, loan in enumerate(data.get("loans", []))
    ]


def _iter_input_files(p: Path) -> Iterable[Path]:
    if p.is_file():
        yield p
    elif p.is_dir():
        for ext in ("*.yaml", "*.yml", "*.json"):
            yield from sorted(p.rglob(ext))


def validate_paths(paths: Iterable[str | Path], *, mode: str | None = None) -> int:
    """Validate files/directories, printing OK or the error per file. Returns 0/1."""
    mode = resolve_mode(mode)
    had_error = False

    for raw in paths:
        target = Path(raw)
        any_seen = False
        for f in _iter_input_files(target):
            any_seen = True
            try:
                validate_loans(load_loans_from_file(f), mode=mode, where=str(f))
                print(f"OK: {f}")
            except ConfigError as e:
                print(f"{e}", file=sys.stderr)
                had_error = True
        if not any_seen:
            print(f"{target}: no YAML/JSON files found", file=sys.stderr)
            had_error = True

    return 1 if had_error else 0


__all__ = [
    "LOAN_FIELDS",
    "coerce_decimal",
    "require_positive",
    "require_non_negative",
    "require_term",
    "resolve_mode",
    "infer_kind",
    "validate_loan_dict",
    "validate_loans",
    "load_loans_from_file",
    "validate_paths",
]
