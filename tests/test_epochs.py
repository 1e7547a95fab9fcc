from __future__ import annotations

import pandas as pd

from canopy_change.classes import ChangeClass, StateClass
from canopy_change.epochs import (
    ASSIGNED,
    NO_CROSSING,
    NOT_APPLICABLE,
    epoch_for_label,
    scan_establishment_epoch,
)
from canopy_change.features import prepare_observations
from canopy_change.pipeline import evaluate_location
from canopy_change.settings import ChangeConfig, Epoch

from builders import make_location_rows


def _make_establishment_observations() -> pd.DataFrame:
    def value(year: int) -> float:
        if year <= 1989:
            return 0.15
        if year <= 1999:
            return 0.45
        if year <= 2004:
            return 0.62
        if year <= 2019:
            return 0.55
        return 0.65

    return prepare_observations(pd.DataFrame(make_location_rows("loc_est", value)))


def test_establishment_epoch_is_first_crossing():
    obs = _make_establishment_observations()
    scan = scan_establishment_epoch(obs, StateClass.BARE, StateClass.DENSE)
    assert scan.label == 2000
    assert scan.status == ASSIGNED


def test_establishment_scenario_end_to_end():
    record = evaluate_location("loc_est", _make_establishment_observations())
    assert record.baseline_state == StateClass.BARE
    assert record.current_state == StateClass.DENSE
    assert record.change_class == ChangeClass.ESTABLISHMENT
    assert record.establishment_epoch == 2000


def test_transient_crossing_is_not_revoked():
    def value(year: int) -> float:
        if 1995 <= year <= 1999:
            return 0.61
        if year >= 2021:
            return 0.7
        return 0.3

    obs = prepare_observations(pd.DataFrame(make_location_rows("loc_spike", value)))
    scan = scan_establishment_epoch(obs, StateClass.SPARSE, StateClass.DENSE)
    assert scan.label == 1995


def test_no_crossing_epoch_is_no_data():
    cfg = ChangeConfig(epochs=(Epoch(1990, 1999, 1990), Epoch(2000, 2009, 2000)))

    def value(year: int) -> float:
        return 0.7 if year >= 2021 else 0.3

    obs = prepare_observations(pd.DataFrame(make_location_rows("loc_late", value)))
    scan = scan_establishment_epoch(obs, StateClass.SPARSE, StateClass.DENSE, cfg)
    assert scan.label is None
    assert scan.status == NO_CROSSING


def test_scan_not_applicable_outside_qualifying_set():
    obs = _make_establishment_observations()
    for baseline, current in [
        (StateClass.TRANSITIONAL, StateClass.DENSE),
        (StateClass.BARE, StateClass.TRANSITIONAL),
        (None, StateClass.DENSE),
        (StateClass.BARE, None),
    ]:
        scan = scan_establishment_epoch(obs, baseline, current)
        assert scan.label is None
        assert scan.status == NOT_APPLICABLE


def test_epoch_for_label():
    epoch = epoch_for_label(2020)
    assert epoch is not None
    assert (epoch.start_year, epoch.end_year) == (2020, 2025)
    assert epoch_for_label(1991) is None
