"""Ordinal land-cover states, trend categories and change classes."""

from __future__ import annotations

from enum import IntEnum

from .settings import ChangeConfig, DEFAULT_CONFIG


class StateClass(IntEnum):
    BARE = 1
    SPARSE = 2
    TRANSITIONAL = 3
    DENSE = 4

    @property
    def label(self) -> str:
        return _STATE_LABELS[self]


class TrendClass(IntEnum):
    LOSING = -1
    STABLE = 0
    GAINING = 1

    @property
    def label(self) -> str:
        return self.name.capitalize()


class ChangeClass(IntEnum):
    """Change classes; integer values are the export codes."""

    NONE = 0
    LOSS = 1
    THINNING = 2
    EMERGING = 3
    THICKENING = 4
    DENSIFICATION = 5
    ESTABLISHMENT = 6

    @property
    def label(self) -> str:
        return _CHANGE_LABELS[self]


_STATE_LABELS = {
    StateClass.BARE: "Bare",
    StateClass.SPARSE: "Sparse",
    StateClass.TRANSITIONAL: "Transitional",
    StateClass.DENSE: "Dense Canopy",
}

_CHANGE_LABELS = {
    ChangeClass.NONE: "No significant change",
    ChangeClass.LOSS: "Canopy Loss",
    ChangeClass.THINNING: "Canopy Thinning",
    ChangeClass.EMERGING: "Emerging Biomass",
    ChangeClass.THICKENING: "Canopy Thickening",
    ChangeClass.DENSIFICATION: "Canopy Densification",
    ChangeClass.ESTABLISHMENT: "Canopy Establishment",
}


def classify_state(value: float | None, config: ChangeConfig = DEFAULT_CONFIG) -> StateClass | None:
    if value is None:
        return None
    if value < config.sparse_threshold:
        return StateClass.BARE
    if value < config.transitional_threshold:
        return StateClass.SPARSE
    if value < config.dense_threshold:
        return StateClass.TRANSITIONAL
    return StateClass.DENSE


def classify_trend(slope: float | None, config: ChangeConfig = DEFAULT_CONFIG) -> TrendClass | None:
    if slope is None:
        return None
    if slope > config.gaining_slope:
        return TrendClass.GAINING
    if slope < config.losing_slope:
        return TrendClass.LOSING
    return TrendClass.STABLE
