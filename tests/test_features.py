from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from canopy_change.features import composite, compute_index, decimal_years, prepare_observations
from canopy_change.settings import DateWindow

from builders import reflectance_for


ALL_MONTHS = tuple(range(1, 13))


def _make_observations(values: list[float], year: int = 2022, month: int = 7) -> pd.DataFrame:
    rows = []
    for i, value in enumerate(values):
        nir, red = reflectance_for(value)
        rows.append(
            {
                "location_id": "loc_a",
                "date": pd.Timestamp(year=year, month=month, day=1 + i),
                "nir": nir,
                "red": red,
                "is_valid": 1,
            }
        )
    return prepare_observations(pd.DataFrame(rows))


def test_compute_index_scalar():
    assert compute_index(0.5, 0.1) == pytest.approx(0.4 / 0.6)
    assert compute_index(0.3, 0.3) == 0.0
    assert compute_index(0.0, 0.0) is None
    assert compute_index(float("nan"), 0.1) is None


def test_compute_index_array_marks_zero_denominator_missing():
    out = compute_index(np.array([0.5, 0.0, 0.3]), np.array([0.1, 0.0, 0.3]))
    assert str(out.dtype) == "Float64"
    assert out.isna().tolist() == [False, True, False]
    assert float(out[0]) == pytest.approx(0.4 / 0.6)
    assert float(out[2]) == 0.0


def test_prepare_observations_requires_columns():
    with pytest.raises(ValueError, match="Missing required columns"):
        prepare_observations(pd.DataFrame({"location_id": ["a"], "date": ["2020-01-01"]}))


def test_prepare_observations_invalid_rows_have_no_index():
    df = pd.DataFrame(
        {
            "location_id": ["a", "a"],
            "date": ["2020-07-01", "2020-07-02"],
            "nir": [0.4, 0.4],
            "red": [0.1, 0.1],
            "is_valid": ["true", "0"],
        }
    )
    out = prepare_observations(df)
    assert out["ndvi"].isna().tolist() == [False, True]


def test_composite_even_count_averages_middle_values():
    obs = _make_observations([0.2, 0.8, 0.4, 0.6])
    window = DateWindow("2022-01-01", "2022-12-31")
    assert composite(obs, window, (7,)) == pytest.approx(0.5)


def test_composite_no_data_when_window_empty():
    obs = _make_observations([0.3, 0.5])
    assert composite(obs, DateWindow("1985-01-01", "1989-12-31"), ALL_MONTHS) is None
    # Right dates, wrong months.
    assert composite(obs, DateWindow("2022-01-01", "2022-12-31"), (1, 2)) is None


def test_composite_window_end_includes_whole_day():
    nir, red = reflectance_for(0.7)
    df = pd.DataFrame(
        {
            "location_id": ["a", "a"],
            "date": [pd.Timestamp("1989-12-31 18:30"), pd.Timestamp("1990-01-01 00:00")],
            "nir": [nir, 0.1],
            "red": [red, 0.1],
            "is_valid": [1, 1],
        }
    )
    obs = prepare_observations(df)
    value = composite(obs, DateWindow("1985-01-01", "1989-12-31"), ALL_MONTHS)
    assert value == pytest.approx(0.7)


def test_composite_stable_under_duplication():
    values = [0.31, 0.45, 0.72, 0.18, 0.66]
    window = DateWindow("2022-01-01", "2022-12-31")
    single = composite(_make_observations(values), window, (7,))
    doubled = composite(_make_observations(values + values), window, (7,))
    assert doubled == pytest.approx(single)


def test_decimal_years_is_continuous():
    dates = pd.Series(pd.to_datetime(["2000-01-01", "2000-07-02", "2001-01-01", "2001-12-31"]))
    years = decimal_years(dates)
    assert years[0] == pytest.approx(2000.0)
    assert years[2] == pytest.approx(2001.0)
    assert 2000.4 < years[1] < 2000.6
    assert np.all(np.diff(years) > 0)
