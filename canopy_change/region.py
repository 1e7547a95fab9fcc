"""Region-of-interest filtering of observation tables."""

from __future__ import annotations

from pathlib import Path

import geopandas as gpd
import pandas as pd
from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

from .errors import BoundaryEmptyError


def load_boundary(path: str | Path, crs: str | None = None) -> BaseGeometry:
    """Read a vector file and dissolve it into a single geometry.

    When ``crs`` is given the boundary is reprojected to the coordinate system
    of the location ``x``/``y`` columns.
    """

    gdf = gpd.read_file(path)
    if gdf.empty:
        raise BoundaryEmptyError(f"Boundary file has no features: {path}")
    if crs is not None and gdf.crs is not None:
        gdf = gdf.to_crs(crs)
    return gdf.geometry.union_all()


def bbox_boundary(minx: float, miny: float, maxx: float, maxy: float) -> BaseGeometry:
    if minx >= maxx or miny >= maxy:
        raise ValueError("Invalid bbox extent values.")
    return box(minx, miny, maxx, maxy)


def location_points(obs: pd.DataFrame) -> gpd.GeoDataFrame:
    """One point per location, from the first ``x``/``y`` seen for it."""

    if not {"x", "y"} <= set(obs.columns):
        raise ValueError("Observation table needs x and y columns for region selection.")
    coords = obs.groupby("location_id", sort=True)[["x", "y"]].first().reset_index()
    return gpd.GeoDataFrame(
        coords,
        geometry=gpd.points_from_xy(coords["x"], coords["y"]),
    )


def select_locations(obs: pd.DataFrame, boundary: BaseGeometry | None) -> pd.DataFrame:
    """Keep rows whose location falls inside ``boundary`` (edges included)."""

    if obs.empty:
        raise BoundaryEmptyError("Observation table is empty.")
    if boundary is None:
        return obs
    points = location_points(obs)
    inside = points.loc[points.geometry.covered_by(boundary), "location_id"]
    if inside.empty:
        raise BoundaryEmptyError("Region boundary contains zero locations.")
    return obs[obs["location_id"].isin(set(inside))].copy()
