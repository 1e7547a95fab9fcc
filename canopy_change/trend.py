"""Long-span least-squares trend of the vegetation index per location."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .features import decimal_years, window_values
from .settings import DateWindow


@dataclass(frozen=True)
class TrendFit:
    slope: float  # index units per year
    intercept: float  # index at the time origin
    n_points: int


def fit_trend(
    obs: pd.DataFrame,
    window: DateWindow,
    months: Iterable[int],
    time_origin: float = 1970.0,
) -> TrendFit | None:
    """Ordinary least squares of every valid observation against decimal years.

    Observations are used individually, not composited. Repeated timestamps
    count as separate points. Returns ``None`` with fewer than two distinct
    times.
    """

    points = window_values(obs, window, months)
    if points.empty:
        return None
    t = decimal_years(points["date"]) - time_origin
    y = points["ndvi"].to_numpy(dtype=float)
    if np.unique(t).size < 2:
        return None
    slope, intercept = np.polyfit(t, y, 1)
    return TrendFit(slope=float(slope), intercept=float(intercept), n_points=int(y.size))
