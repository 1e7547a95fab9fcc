from __future__ import annotations

import numpy as np
import pytest

from canopy_change.classes import ChangeClass, StateClass, TrendClass, classify_state, classify_trend
from canopy_change.settings import ChangeConfig


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (-0.5, StateClass.BARE),
        (0.1999, StateClass.BARE),
        (0.2, StateClass.SPARSE),
        (0.3999, StateClass.SPARSE),
        (0.4, StateClass.TRANSITIONAL),
        (0.5999, StateClass.TRANSITIONAL),
        (0.6, StateClass.DENSE),
        (0.95, StateClass.DENSE),
    ],
)
def test_classify_state_thresholds(value, expected):
    assert classify_state(value) == expected


def test_classify_state_is_total_and_monotone():
    values = np.linspace(-1.0, 1.0, 801)
    states = [classify_state(float(v)) for v in values]
    assert all(isinstance(s, StateClass) for s in states)
    assert all(a <= b for a, b in zip(states[:-1], states[1:]))


def test_classify_state_no_data_propagates():
    assert classify_state(None) is None


def test_classify_state_uses_configured_thresholds():
    cfg = ChangeConfig(sparse_threshold=0.1, transitional_threshold=0.3, dense_threshold=0.5)
    assert classify_state(0.55, cfg) == StateClass.DENSE
    assert classify_state(0.55) == StateClass.TRANSITIONAL


@pytest.mark.parametrize(
    ("slope", "expected"),
    [
        (0.02, TrendClass.GAINING),
        (0.0051, TrendClass.GAINING),
        (0.005, TrendClass.STABLE),
        (0.0, TrendClass.STABLE),
        (-0.005, TrendClass.STABLE),
        (-0.0051, TrendClass.LOSING),
    ],
)
def test_classify_trend_thresholds(slope, expected):
    assert classify_trend(slope) == expected


def test_classify_trend_no_data_propagates():
    assert classify_trend(None) is None


def test_change_class_codes_and_labels():
    assert int(ChangeClass.NONE) == 0
    assert int(ChangeClass.ESTABLISHMENT) == 6
    assert ChangeClass.LOSS.label == "Canopy Loss"
    assert ChangeClass.EMERGING.label == "Emerging Biomass"
    assert StateClass.DENSE.label == "Dense Canopy"
    assert TrendClass.GAINING.label == "Gaining"
