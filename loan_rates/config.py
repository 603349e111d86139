from __future__ import annotations

import io
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import yaml

from loan_rates.errors import ConfigError

EXPONENTIATION_MODES = ("float", "exact")

ENV_MAX_ITERATIONS = "LOAN_RATES_MAX_ITERATIONS"
ENV_TIMEOUT = "LOAN_RATES_TIMEOUT"
ENV_EXPONENTIATION = "LOAN_RATES_EXPONENTIATION"


@dataclass(frozen=True)
class SolverSettings:
    """
    Budget and arithmetic knobs for the Newton solver.
      max_iterations : hard cap on Newton steps
      timeout        : optional wall-clock budget in seconds
      exponentiation : "float" (binary round trip) or "exact"
    """

    max_iterations: int = 10_000
    timeout: Optional[float] = None
    exponentiation: str = "float"

    def __post_init__(self) -> None:
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            raise ConfigError("max_iterations must be an integer")
        if self.max_iterations < 0:
            raise ConfigError("max_iterations must be >= 0")
        if self.timeout is not None and not self.timeout > 0:
            raise ConfigError("timeout must be > 0 when set")
        if self.exponentiation not in EXPONENTIATION_MODES:
            raise ConfigError(
                f"exponentiation must be one of {EXPONENTIATION_MODES}, got {self.exponentiation!r}"
            )


def _solver_section(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Accept either {'solver': {...}} or flat keys at top level.
    Prefers the nested section if both are present.
    """
    flat = {k: cfg[k] for k in ("max_iterations", "timeout", "exponentiation") if k in cfg}
    nested = cfg.get("solver")
    if isinstance(nested, dict):
        flat.update(nested)
    return flat


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    try:
        if values.get("max_iterations") is not None:
            out["max_iterations"] = int(values["max_iterations"])
        if values.get("timeout") is not None:
            out["timeout"] = float(values["timeout"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid solver setting: {e}") from e
    if values.get("exponentiation") is not None:
        out["exponentiation"] = str(values["exponentiation"]).strip().lower()
    return out


def _from_env() -> Dict[str, Any]:
    env = {
        "max_iterations": os.environ.get(ENV_MAX_ITERATIONS) or None,
        "timeout": os.environ.get(ENV_TIMEOUT) or None,
        "exponentiation": os.environ.get(ENV_EXPONENTIATION) or None,
    }
    return _coerce(env)


def settings_from_mapping(cfg: Dict[str, Any], base: Optional[SolverSettings] = None) -> SolverSettings:
    """Overlay the solver keys found in `cfg` onto `base` (defaults if None)."""
    return replace(base or SolverSettings(), **_coerce(_solver_section(cfg or {})))


def load_solver_settings(
    source: str | os.PathLike | io.StringIO | None = None,
) -> SolverSettings:
    """
    Load solver settings: defaults, then YAML from a path or text stream,
    then LOAN_RATES_* environment variables.
    """
    settings = SolverSettings()
    if source is not None:
        if hasattr(source, "read"):
            text = str(source.read())
        else:
            p = os.fspath(source)
            try:
                with open(p, "r", encoding="utf-8") as f:
                    text = f.read()
            except OSError as e:
                raise ConfigError(f"cannot read config {p}: {e}") from e
        try:
            cfg = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML config: {e}") from e
        if not isinstance(cfg, dict):
            raise ConfigError("config must be a mapping")
        settings = settings_from_mapping(cfg, settings)

    return replace(settings, **_from_env())


__all__ = [
    "SolverSettings",
    "EXPONENTIATION_MODES",
    "settings_from_mapping",
    "load_solver_settings",
]
