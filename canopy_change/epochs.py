"""Dating of canopy establishment against fixed multi-year epochs."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from .classes import StateClass
from .features import composite
from .settings import ChangeConfig, DEFAULT_CONFIG, Epoch


ASSIGNED = "assigned"
NO_CROSSING = "no_crossing"
NOT_APPLICABLE = "not_applicable"

ESTABLISHMENT_BASELINES = frozenset({StateClass.SPARSE, StateClass.BARE})


@dataclass(frozen=True)
class EpochScan:
    label: int | None
    status: str


def qualifies_for_epoch(baseline: StateClass | None, current: StateClass | None) -> bool:
    return baseline in ESTABLISHMENT_BASELINES and current == StateClass.DENSE


def epoch_composites(
    obs: pd.DataFrame,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> list[tuple[Epoch, float | None]]:
    return [(epoch, composite(obs, epoch.window, config.composite_months)) for epoch in config.epochs]


def scan_establishment_epoch(
    obs: pd.DataFrame,
    baseline: StateClass | None,
    current: StateClass | None,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> EpochScan:
    """Earliest epoch whose composite reaches the dense threshold.

    A single crossing is enough; later epochs falling back below the
    threshold do not revoke it. Qualifying locations with no crossing epoch
    get ``no_crossing`` and no label.
    """

    if not qualifies_for_epoch(baseline, current):
        return EpochScan(label=None, status=NOT_APPLICABLE)
    for epoch, value in epoch_composites(obs, config):
        if value is not None and value >= config.dense_threshold:
            return EpochScan(label=epoch.label, status=ASSIGNED)
    return EpochScan(label=None, status=NO_CROSSING)


def epoch_for_label(label: int, config: ChangeConfig = DEFAULT_CONFIG) -> Epoch | None:
    for epoch in config.epochs:
        if epoch.label == label:
            return epoch
    return None
