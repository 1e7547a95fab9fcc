"""FastAPI point-inspector service over a canopy change observation table."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import numpy as np
import pandas as pd
from fastapi import FastAPI, HTTPException, Query

from canopy_change.errors import ConfigurationError
from canopy_change.features import prepare_observations
from canopy_change.pipeline import (
    LocationRecord,
    describe_location,
    lookup_location,
    nearest_location_id,
    record_to_dict,
)
from canopy_change.settings import ChangeConfig, config_to_dict, load_config


OBSERVATIONS_PATH = os.getenv("CC_OBSERVATIONS_PATH", "observations.parquet")
CONFIG_PATH = os.getenv("CC_CONFIG_PATH") or None

app = FastAPI(title="Canopy Change API", version="0.1.0")


def _jsonable(value: object) -> object:
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating, float)):
        if pd.isna(value):
            return None
        return float(value)
    if isinstance(value, (pd.Timestamp, pd.Period)):
        return str(value)
    if value is pd.NA or value is pd.NaT:
        return None
    return value


def _read_table(path: str) -> pd.DataFrame:
    suffix = Path(path).suffix.lower()
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported observation table format: {path}")


@lru_cache(maxsize=1)
def _load_config() -> ChangeConfig:
    return load_config(CONFIG_PATH)


@lru_cache(maxsize=1)
def _load_observations() -> pd.DataFrame:
    if not os.path.exists(OBSERVATIONS_PATH):
        raise FileNotFoundError(
            f"Observation table not found at {OBSERVATIONS_PATH}. "
            "Set CC_OBSERVATIONS_PATH to your input file."
        )
    return prepare_observations(_read_table(OBSERVATIONS_PATH))


def _location_payload(record: LocationRecord, config: ChangeConfig) -> dict[str, object]:
    payload = {key: _jsonable(value) for key, value in record_to_dict(record).items()}
    payload["summary"] = describe_location(record, config)
    return payload


@app.get("/health")
def health() -> dict[str, object]:
    try:
        df = _load_observations()
        _load_config()
    except (FileNotFoundError, ConfigurationError) as exc:
        return {"status": "degraded", "detail": str(exc)}

    return {
        "status": "ok",
        "rows": int(len(df)),
        "locations": int(df["location_id"].nunique()),
    }


@app.get("/config")
def config() -> dict[str, object]:
    try:
        return config_to_dict(_load_config())
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/reload")
def reload_data() -> dict[str, str]:
    _load_observations.cache_clear()
    _load_config.cache_clear()
    return {"status": "reloaded"}


@app.get("/locations/nearest")
def nearest_location(
    x: float = Query(..., description="Location x coordinate"),
    y: float = Query(..., description="Location y coordinate"),
) -> dict[str, object]:
    df = _load_observations()
    try:
        location_id = nearest_location_id(df, x, y)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    cfg = _load_config()
    return _location_payload(lookup_location(df, location_id, cfg), cfg)


@app.get("/locations/{location_id}")
def location(location_id: str) -> dict[str, object]:
    df = _load_observations()
    cfg = _load_config()
    try:
        record = lookup_location(df, location_id, cfg)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"location_id not found: {location_id}") from exc
    return _location_payload(record, cfg)
