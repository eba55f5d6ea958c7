"""Report options, loaded from pyproject.toml and optional .station_stats.toml."""

from __future__ import annotations

import math
import tomllib
import warnings
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_COMPARISON, DEFAULT_DECIMALS, DEFAULT_MODERATE_BELOW,
    DEFAULT_RANK_METRIC, DEFAULT_STABLE_BELOW, DEFAULT_STD_MODE,
    DEFAULT_THRESHOLD, DEFAULT_TITLE, DEFAULT_TOP_N, MAX_DECIMALS,
    MIN_DECIMALS, NAME_WIDTH, NUMBER_WIDTH, RANK_METRICS,
)
from .data_model import Comparison, StdMode
from .errors import InvalidThresholdError
from .stats_engine import coerce_comparison, validate_bands

LOCAL_CONFIG_NAME = ".station_stats.toml"
PYPROJECT_TABLE = "station_stats"


@dataclass(frozen=True)
class ReportOptions:
    """Runtime options for statistics and report rendering."""

    # Report heading and unit suffix appended to values ("mm", "°C")
    title: str = DEFAULT_TITLE
    units: str = ""

    # Warning threshold applied to each group mean; None disables warnings
    threshold: Optional[float] = DEFAULT_THRESHOLD
    comparison: Comparison = Comparison(DEFAULT_COMPARISON)

    # Standard deviation divisor: "sample" (n - 1) or "population" (n)
    std_mode: StdMode = StdMode(DEFAULT_STD_MODE)

    # Decimal places for every number in the report (2..4)
    decimals: int = DEFAULT_DECIMALS

    # Rankings: metric and how many groups to list at each end
    rank_by: str = DEFAULT_RANK_METRIC
    top_n: int = DEFAULT_TOP_N

    # Variability bands on std: below stable_below is "Very Stable",
    # below moderate_below is "Moderately Stable", otherwise "Unstable"
    stable_below: float = DEFAULT_STABLE_BELOW
    moderate_below: float = DEFAULT_MODERATE_BELOW

    # Append the per-label (regional) summary when groups carry labels
    include_regions: bool = True

    # Column widths of the fixed-width tables
    name_width: int = NAME_WIDTH
    number_width: int = NUMBER_WIDTH

    def __post_init__(self):
        # Accept plain strings from TOML / argparse
        object.__setattr__(self, 'comparison', coerce_comparison(self.comparison))
        object.__setattr__(self, 'std_mode', _as_std_mode(self.std_mode))

        if not MIN_DECIMALS <= self.decimals <= MAX_DECIMALS:
            raise ValueError(
                f"decimals must be between {MIN_DECIMALS} and {MAX_DECIMALS}, "
                f"got {self.decimals}."
            )
        if self.top_n < 0:
            raise ValueError(f"top_n must be non-negative, got {self.top_n}.")
        if self.rank_by not in RANK_METRICS:
            raise ValueError(
                f"rank_by must be one of {', '.join(RANK_METRICS)}, got {self.rank_by!r}."
            )
        if self.name_width < 1 or self.number_width < 1:
            raise ValueError("Column widths must be positive.")
        if self.threshold is not None and not math.isfinite(self.threshold):
            raise InvalidThresholdError(
                f"threshold must be a finite number, got {self.threshold!r}."
            )
        validate_bands(self.stable_below, self.moderate_below)

    def with_overrides(self, **overrides: Any) -> "ReportOptions":
        """Return a copy with the non-``None`` *overrides* applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _as_std_mode(value) -> StdMode:
    try:
        return StdMode(value)
    except ValueError:
        raise ValueError(
            f"Unknown std_mode {value!r}; expected 'sample' or 'population'."
        ) from None


def _read_toml(path: Path) -> dict:
    """Read a TOML file; return empty dict if it is missing or unparseable."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        warnings.warn(f"Ignoring unparseable config file '{path}': {exc}", stacklevel=3)
        return {}


def _apply(values: Dict[str, Any], d: dict) -> None:
    """Overlay dict values onto *values*, ignoring unknown keys."""
    valid = {f.name for f in fields(ReportOptions)}
    for key, val in d.items():
        key = key.replace("-", "_")
        if key in valid:
            values[key] = val


def load_config(project_root: Optional[Path] = None,
                path: Optional[Path] = None) -> ReportOptions:
    """Load options from pyproject.toml [tool.station_stats], then .station_stats.toml.

    An explicit *path* is read last and must exist.
    """
    if project_root is None:
        project_root = Path.cwd()
    values: Dict[str, Any] = {}
    pyproject = _read_toml(project_root / "pyproject.toml")
    _apply(values, pyproject.get("tool", {}).get(PYPROJECT_TABLE, {}))
    _apply(values, _read_toml(project_root / LOCAL_CONFIG_NAME))
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        _apply(values, _read_toml(path))
    return ReportOptions(**values)
