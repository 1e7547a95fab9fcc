"""Linear projection of years until the dense-canopy threshold is reached."""

from __future__ import annotations

from dataclasses import dataclass

from .classes import StateClass, TrendClass
from .settings import ChangeConfig, DEFAULT_CONFIG


PROJECTED = "projected"
INDETERMINATE = "indeterminate"
NOT_APPLICABLE = "not_applicable"
NO_DATA = "no_data"


@dataclass(frozen=True)
class Projection:
    years: float | None
    status: str


def project_years(
    current_composite: float,
    slope: float,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> Projection:
    """Years for ``current_composite`` to reach the dense threshold at constant ``slope``."""

    if current_composite >= config.dense_threshold:
        return Projection(years=0.0, status=PROJECTED)
    if slope <= 0:
        return Projection(years=None, status=NOT_APPLICABLE)

    years = (config.dense_threshold - current_composite) / slope
    years = min(max(years, 0.0), config.max_projection_years)
    if years >= config.max_projection_years:
        return Projection(years=None, status=INDETERMINATE)
    return Projection(years=float(years), status=PROJECTED)


def project_location(
    current_composite: float | None,
    current_state: StateClass | None,
    trend: TrendClass | None,
    slope: float | None,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> Projection:
    """Projection gated to gaining locations still below dense canopy."""

    if current_composite is None or current_state is None or trend is None or slope is None:
        return Projection(years=None, status=NO_DATA)
    if trend != TrendClass.GAINING or current_state >= StateClass.DENSE:
        return Projection(years=None, status=NOT_APPLICABLE)
    return project_years(current_composite, slope, config)
