"""Run-level failures for canopy change classification.

Per-location problems (no observations in a window, an underdetermined fit,
a zero index denominator) are never raised; they surface as ``None`` fields on
that location's record.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Configuration rejected before any location is processed."""


class BoundaryEmptyError(ValueError):
    """The region (or the input table) yields zero locations."""
