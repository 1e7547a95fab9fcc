from __future__ import annotations

from collections.abc import Callable

import pandas as pd


SUMMER_MONTHS = (6, 7, 8, 9)


def reflectance_for(ndvi: float, red: float = 0.05) -> tuple[float, float]:
    return red * (1.0 + ndvi) / (1.0 - ndvi), red


def make_location_rows(
    location_id: str,
    value_for_year: Callable[[int], float | None],
    x: float = 0.0,
    y: float = 0.0,
    start_year: int = 1985,
    end_year: int = 2025,
    months: tuple[int, ...] = SUMMER_MONTHS,
) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for year in range(start_year, end_year + 1):
        value = value_for_year(year)
        if value is None:
            continue
        for month in months:
            nir, red = reflectance_for(value)
            rows.append(
                {
                    "location_id": location_id,
                    "x": x,
                    "y": y,
                    "date": pd.Timestamp(year=year, month=month, day=15),
                    "nir": nir,
                    "red": red,
                    "is_valid": 1,
                }
            )
    return rows


def value_path(baseline: float, current: float) -> Callable[[int], float]:
    """Flat baseline to 1989, linear ramp, flat current from 2021."""

    def value(year: int) -> float:
        if year <= 1989:
            return baseline
        if year >= 2021:
            return current
        frac = (year - 1989) / (2021 - 1989)
        return baseline + (current - baseline) * frac

    return value
