"""Canopy change classification modules."""

from .classes import ChangeClass, StateClass, TrendClass, classify_state, classify_trend
from .epochs import scan_establishment_epoch
from .errors import BoundaryEmptyError, ConfigurationError
from .features import composite, compute_index, prepare_observations
from .forecast import project_location, project_years
from .pipeline import (
    LocationRecord,
    classify_grid,
    describe_location,
    evaluate_location,
    lookup_location,
    records_to_frame,
)
from .rules import CHANGE_RULES, decide_change
from .settings import DEFAULT_CONFIG, ChangeConfig, DateWindow, Epoch, load_config
from .trend import TrendFit, fit_trend

__all__ = [
    "BoundaryEmptyError",
    "CHANGE_RULES",
    "ChangeClass",
    "ChangeConfig",
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "DateWindow",
    "Epoch",
    "LocationRecord",
    "StateClass",
    "TrendClass",
    "TrendFit",
    "classify_grid",
    "classify_state",
    "classify_trend",
    "composite",
    "compute_index",
    "decide_change",
    "describe_location",
    "evaluate_location",
    "fit_trend",
    "load_config",
    "lookup_location",
    "prepare_observations",
    "project_location",
    "project_years",
    "records_to_frame",
    "scan_establishment_epoch",
]
