"""Optimizer configuration for rehearsalplan."""

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from rehearsalplan.errors import InvalidInput
from rehearsalplan.sessions import MAX_SESSIONS


@dataclass(frozen=True)
class OptimizerOptions:
    """Tuning knobs for the annealing search."""

    sessions: int = 1
    max_iter: int = 10000
    t0: float = 100.0  # initial temperature
    t_min: float = 0.1
    cooling: float = 0.99  # temperature multiplier per iteration
    w_conflict: float = 15.0
    w_overlap: float = 2.0
    overlap_exp: float = 1.5
    seed: int | None = None
    time_limit_ms: float | None = None  # stop early and keep the best so far

    def validate(self) -> "OptimizerOptions":
        """Raise InvalidInput if any option is out of range, else return self."""
        if not 1 <= self.sessions <= MAX_SESSIONS:
            raise InvalidInput(f"sessions must be between 1 and {MAX_SESSIONS}")
        if self.max_iter < 0:
            raise InvalidInput("max_iter must be >= 0")
        if self.t0 <= 0:
            raise InvalidInput("t0 must be > 0")
        if self.t_min <= 0:
            raise InvalidInput("t_min must be > 0")
        if not 0 < self.cooling < 1:
            raise InvalidInput("cooling must be in (0, 1)")
        if self.time_limit_ms is not None and self.time_limit_ms < 0:
            raise InvalidInput("time_limit_ms must be >= 0")
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0
        ):
            raise InvalidInput(f"seed must be a non-negative integer, got {self.seed!r}")
        return self

    def with_overrides(self, **overrides) -> "OptimizerOptions":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def options_from_dict(data: dict) -> OptimizerOptions:
    """Build options from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(OptimizerOptions)}
    unknown = set(data) - known
    if unknown:
        raise InvalidInput(f"Unknown optimizer options: {', '.join(sorted(unknown))}")
    try:
        return OptimizerOptions(**data).validate()
    except TypeError as e:
        raise InvalidInput(f"Invalid optimizer options: {e}") from e


def load_options_yaml(yaml_path: Path) -> OptimizerOptions:
    """
    Read the `optimizer:` section of a YAML config file.

    A missing or empty section yields the defaults.
    """
    with yaml_path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidInput(f"Malformed config file {yaml_path}: {e}") from e

    if not data:
        return OptimizerOptions()
    if not isinstance(data, dict):
        raise InvalidInput(f"Config file must contain a mapping: {yaml_path}")

    section = data.get("optimizer") or {}
    if not isinstance(section, dict):
        raise InvalidInput("The optimizer section must be a mapping")
    return options_from_dict(section)
