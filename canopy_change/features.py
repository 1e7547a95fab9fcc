"""Vegetation index and period composites from per-location observation tables."""

from __future__ import annotations

from collections.abc import Iterable
import math

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from .settings import DateWindow


REQUIRED_OBSERVATION_COLUMNS = {"location_id", "date", "nir", "red", "is_valid"}


def _require_columns(df: pd.DataFrame, required: Iterable[str]) -> None:
    missing = sorted(set(required) - set(df.columns))
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def compute_index(
    nir: float | ArrayLike,
    red: float | ArrayLike,
) -> float | None | pd.arrays.FloatingArray:
    """Normalized difference (nir - red) / (nir + red).

    Scalars return ``float | None``. Arrays and Series return a nullable
    ``Float64`` array with ``<NA>`` wherever the denominator is zero or an
    input is not finite.
    """

    if np.isscalar(nir) and np.isscalar(red):
        nir_f, red_f = float(nir), float(red)
        denom = nir_f + red_f
        if denom == 0 or not (math.isfinite(nir_f) and math.isfinite(red_f)):
            return None
        return (nir_f - red_f) / denom

    nir_arr = np.asarray(pd.to_numeric(pd.Series(nir), errors="coerce"), dtype=float)
    red_arr = np.asarray(pd.to_numeric(pd.Series(red), errors="coerce"), dtype=float)
    denom = nir_arr + red_arr
    ok = np.isfinite(nir_arr) & np.isfinite(red_arr) & (denom != 0)
    values = np.zeros_like(denom)
    np.divide(nir_arr - red_arr, denom, out=values, where=ok)
    return pd.arrays.FloatingArray(values, ~ok)


def _to_bool(series: pd.Series) -> pd.Series:
    if series.dtype == bool:
        return series
    return (
        series.astype(str)
        .str.strip()
        .str.lower()
        .isin({"1", "true", "yes", "y", "1.0"})
    )


def prepare_observations(obs_df: pd.DataFrame) -> pd.DataFrame:
    """Validate an observation table and attach the ``ndvi`` column.

    Expected input grain: one row per location per acquisition. Rows flagged
    invalid keep their place in the table but get an undefined index value.
    Any incoming ``ndvi`` column is replaced: the index is always derived from
    ``nir``/``red``, so preparing a prepared table is a no-op. Timestamps are
    converted to naive UTC.
    """

    _require_columns(obs_df, REQUIRED_OBSERVATION_COLUMNS)
    df = obs_df.copy()
    df["location_id"] = df["location_id"].astype(str)
    df["date"] = pd.to_datetime(df["date"], utc=True).dt.tz_convert(None)
    df["is_valid"] = _to_bool(df["is_valid"])
    ndvi = compute_index(df["nir"].to_numpy(), df["red"].to_numpy())
    ndvi[~df["is_valid"].to_numpy()] = pd.NA
    df["ndvi"] = ndvi
    return df.sort_values(["location_id", "date"], kind="stable").reset_index(drop=True)


def decimal_years(dates: pd.Series) -> np.ndarray:
    """Continuous calendar-year coordinate, e.g. 2000-07-02 -> ~2000.5."""

    dates = pd.to_datetime(pd.Series(dates))
    year_start = dates.dt.to_period("Y").dt.to_timestamp()
    year_len = np.where(dates.dt.is_leap_year, 366.0, 365.0)
    elapsed = (dates - year_start).dt.total_seconds().to_numpy(dtype=float) / 86400.0
    return dates.dt.year.to_numpy(dtype=float) + elapsed / year_len


def window_values(
    obs: pd.DataFrame,
    window: DateWindow,
    months: Iterable[int],
) -> pd.DataFrame:
    """Rows with a defined index inside ``window`` and the calendar-month filter."""

    dates = obs["date"]
    in_window = (dates >= window.start_ts) & (dates < window.end_exclusive_ts)
    in_months = dates.dt.month.isin(list(months))
    defined = obs["ndvi"].notna()
    return obs.loc[in_window & in_months & defined, ["date", "ndvi"]]


def composite(
    obs: pd.DataFrame,
    window: DateWindow,
    months: Iterable[int],
) -> float | None:
    """Median index over one window; ``None`` when no valid observation falls in it."""

    values = window_values(obs, window, months)["ndvi"].to_numpy(dtype=float)
    if values.size == 0:
        return None
    return float(np.median(values))
