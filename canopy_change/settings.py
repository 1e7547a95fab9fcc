"""Project defaults and validated run configuration for canopy change analysis."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import pandas as pd

from .errors import ConfigurationError


@dataclass(frozen=True)
class DateWindow:
    """Closed date range; ``end`` includes the whole end day."""

    start: str
    end: str

    def __post_init__(self) -> None:
        try:
            start = pd.Timestamp(self.start)
            end = pd.Timestamp(self.end)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid window dates: {self.start!r}..{self.end!r}") from exc
        if start > end:
            raise ConfigurationError(f"Window start {self.start} is after end {self.end}")

    @property
    def start_ts(self) -> pd.Timestamp:
        return pd.Timestamp(self.start).normalize()

    @property
    def end_exclusive_ts(self) -> pd.Timestamp:
        return pd.Timestamp(self.end).normalize() + pd.Timedelta(days=1)


@dataclass(frozen=True)
class Epoch:
    start_year: int
    end_year: int
    label: int

    @property
    def window(self) -> DateWindow:
        return DateWindow(f"{self.start_year}-01-01", f"{self.end_year}-12-31")


DEFAULT_EPOCHS: tuple[Epoch, ...] = (
    Epoch(1990, 1994, 1990),
    Epoch(1995, 1999, 1995),
    Epoch(2000, 2004, 2000),
    Epoch(2005, 2009, 2005),
    Epoch(2010, 2014, 2010),
    Epoch(2015, 2019, 2015),
    Epoch(2020, 2025, 2020),
)


@dataclass(frozen=True)
class ChangeConfig:
    dense_threshold: float = 0.6
    transitional_threshold: float = 0.4
    sparse_threshold: float = 0.2
    gaining_slope: float = 0.005
    losing_slope: float = -0.005
    baseline_window: DateWindow = DateWindow("1985-01-01", "1989-12-31")
    current_window: DateWindow = DateWindow("2021-01-01", "2025-12-31")
    trend_window: DateWindow = DateWindow("1985-01-01", "2025-12-31")
    # Summer months of the northern hemisphere.
    composite_months: tuple[int, ...] = (6, 7, 8, 9)
    epochs: tuple[Epoch, ...] = field(default=DEFAULT_EPOCHS)
    max_projection_years: float = 50.0
    time_origin_year: float = 1970.0

    def __post_init__(self) -> None:
        validate_config(self)


def validate_config(config: ChangeConfig) -> None:
    """Raise ``ConfigurationError`` if thresholds, months or epochs are inconsistent."""

    if not (config.sparse_threshold < config.transitional_threshold < config.dense_threshold):
        raise ConfigurationError(
            "Thresholds must satisfy sparse < transitional < dense, got "
            f"{config.sparse_threshold}, {config.transitional_threshold}, {config.dense_threshold}"
        )
    if not config.losing_slope < config.gaining_slope:
        raise ConfigurationError(
            f"losing_slope ({config.losing_slope}) must be below gaining_slope ({config.gaining_slope})"
        )
    if not config.composite_months:
        raise ConfigurationError("composite_months must not be empty")
    bad_months = [m for m in config.composite_months if not 1 <= int(m) <= 12]
    if bad_months:
        raise ConfigurationError(f"Invalid calendar months: {bad_months}")
    if config.max_projection_years <= 0:
        raise ConfigurationError("max_projection_years must be positive")

    labels = [epoch.label for epoch in config.epochs]
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f"Duplicate epoch labels: {labels}")
    previous: Epoch | None = None
    for epoch in config.epochs:
        if epoch.start_year > epoch.end_year:
            raise ConfigurationError(f"Epoch {epoch.label} starts after it ends")
        if previous is not None:
            if epoch.start_year <= previous.end_year:
                raise ConfigurationError(
                    f"Epoch {epoch.label} overlaps or precedes epoch {previous.label}"
                )
            if epoch.label <= previous.label:
                raise ConfigurationError("Epoch labels must increase chronologically")
        previous = epoch


def _window_from_json(value: object, name: str) -> DateWindow:
    if isinstance(value, dict) and {"start", "end"} <= set(value):
        return DateWindow(str(value["start"]), str(value["end"]))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return DateWindow(str(value[0]), str(value[1]))
    raise ConfigurationError(f"{name} must be {{'start': ..., 'end': ...}} or [start, end]")


def _epoch_from_json(value: object) -> Epoch:
    try:
        if isinstance(value, dict):
            return Epoch(int(value["start_year"]), int(value["end_year"]), int(value["label"]))
        start_year, end_year, label = value  # type: ignore[misc]
        return Epoch(int(start_year), int(end_year), int(label))
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid epoch definition: {value!r}") from exc


def config_from_mapping(overrides: dict[str, object], base: ChangeConfig | None = None) -> ChangeConfig:
    """Apply JSON-style overrides on top of ``base`` (defaults when omitted)."""

    known = {f.name for f in fields(ChangeConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {unknown}")

    values: dict[str, object] = {}
    for key, value in overrides.items():
        if key.endswith("_window"):
            values[key] = _window_from_json(value, key)
        elif key == "epochs":
            if not isinstance(value, (list, tuple)):
                raise ConfigurationError(f"epochs must be a list, got {value!r}")
            values[key] = tuple(_epoch_from_json(item) for item in value)
        elif key == "composite_months":
            if not isinstance(value, (list, tuple)):
                raise ConfigurationError(f"composite_months must be a list, got {value!r}")
            try:
                values[key] = tuple(int(m) for m in value)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"composite_months must be integers, got {value!r}") from exc
        else:
            try:
                values[key] = float(value)  # type: ignore[arg-type]
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"{key} must be numeric, got {value!r}") from exc
    return replace(base or DEFAULT_CONFIG, **values)


def load_config(path: str | Path | None) -> ChangeConfig:
    if path is None:
        return DEFAULT_CONFIG
    with Path(path).open(encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ConfigurationError("Configuration file must contain a JSON object")
    return config_from_mapping(payload)


def config_to_dict(config: ChangeConfig) -> dict[str, object]:
    return {
        "dense_threshold": config.dense_threshold,
        "transitional_threshold": config.transitional_threshold,
        "sparse_threshold": config.sparse_threshold,
        "gaining_slope": config.gaining_slope,
        "losing_slope": config.losing_slope,
        "baseline_window": {"start": config.baseline_window.start, "end": config.baseline_window.end},
        "current_window": {"start": config.current_window.start, "end": config.current_window.end},
        "trend_window": {"start": config.trend_window.start, "end": config.trend_window.end},
        "composite_months": list(config.composite_months),
        "epochs": [
            {"start_year": e.start_year, "end_year": e.end_year, "label": e.label} for e in config.epochs
        ],
        "max_projection_years": config.max_projection_years,
        "time_origin_year": config.time_origin_year,
    }


DEFAULT_CONFIG = ChangeConfig()
