"""CLI pipeline: observation table -> per-location change classification table."""

from __future__ import annotations

import argparse
import concurrent.futures
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from .classes import ChangeClass, StateClass, TrendClass, classify_state, classify_trend
from .epochs import epoch_for_label, scan_establishment_epoch
from .errors import BoundaryEmptyError
from .features import composite, prepare_observations, window_values
from .forecast import INDETERMINATE, PROJECTED, project_location
from .region import load_boundary, select_locations
from .rules import decide_change
from .settings import ChangeConfig, DEFAULT_CONFIG, load_config
from .trend import fit_trend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationRecord:
    """Every derived value for one location; ``None`` marks no-data."""

    location_id: str
    x: float | None
    y: float | None
    obs_count: int
    baseline_composite: float | None
    current_composite: float | None
    baseline_state: StateClass | None
    current_state: StateClass | None
    slope: float | None
    intercept: float | None
    trend_class: TrendClass | None
    change_class: ChangeClass | None
    establishment_epoch: int | None
    epoch_status: str
    projected_years: float | None
    projection_status: str


def _coordinate(obs: pd.DataFrame, column: str) -> float | None:
    if column not in obs.columns:
        return None
    values = pd.to_numeric(obs[column], errors="coerce").dropna()
    return float(values.iloc[0]) if not values.empty else None


def evaluate_location(
    location_id: str,
    obs: pd.DataFrame,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> LocationRecord:
    """Run the full per-location chain on an already prepared observation frame."""

    months = config.composite_months
    baseline_value = composite(obs, config.baseline_window, months)
    current_value = composite(obs, config.current_window, months)
    baseline_state = classify_state(baseline_value, config)
    current_state = classify_state(current_value, config)

    fit = fit_trend(obs, config.trend_window, months, time_origin=config.time_origin_year)
    slope = fit.slope if fit is not None else None
    trend_class = classify_trend(slope, config)

    if baseline_state is None or current_state is None or trend_class is None:
        change_class = None
        logger.debug(
            "Location %s has no-data inputs (baseline=%s current=%s trend=%s)",
            location_id,
            baseline_state,
            current_state,
            trend_class,
        )
    else:
        change_class = decide_change(baseline_state, current_state, trend_class)

    scan = scan_establishment_epoch(obs, baseline_state, current_state, config)
    projection = project_location(current_value, current_state, trend_class, slope, config)

    return LocationRecord(
        location_id=str(location_id),
        x=_coordinate(obs, "x"),
        y=_coordinate(obs, "y"),
        obs_count=len(window_values(obs, config.trend_window, months)),
        baseline_composite=baseline_value,
        current_composite=current_value,
        baseline_state=baseline_state,
        current_state=current_state,
        slope=slope,
        intercept=fit.intercept if fit is not None else None,
        trend_class=trend_class,
        change_class=change_class,
        establishment_epoch=scan.label,
        epoch_status=scan.status,
        projected_years=projection.years,
        projection_status=projection.status,
    )


def _evaluate_tile(tile: pd.DataFrame, config: ChangeConfig) -> list[LocationRecord]:
    return [
        evaluate_location(location_id, group, config)
        for location_id, group in tile.groupby("location_id", sort=True)
    ]


def _iter_tiles(obs: pd.DataFrame, tile_size: int) -> list[pd.DataFrame]:
    location_ids = np.sort(obs["location_id"].unique())
    tile_of = {location_id: i // tile_size for i, location_id in enumerate(location_ids)}
    tile_no = obs["location_id"].map(tile_of)
    return [tile for _, tile in obs.groupby(tile_no, sort=True)]


def classify_grid(
    obs_df: pd.DataFrame,
    config: ChangeConfig = DEFAULT_CONFIG,
    workers: int | None = None,
    tile_size: int = 256,
    executor: str = "process",
) -> list[LocationRecord]:
    """Classify every location in ``obs_df``.

    Locations are split into tiles of ``tile_size`` and evaluated
    independently, in a thread or process pool when ``workers > 1``. Output is
    ordered by ``location_id``.
    """

    if tile_size < 1:
        raise ValueError("tile_size must be >= 1")
    if executor not in {"thread", "process"}:
        raise ValueError(f"Unsupported executor: {executor}. Use 'thread' or 'process'")

    obs = prepare_observations(obs_df)
    if obs.empty:
        raise BoundaryEmptyError("No locations to classify.")

    tiles = _iter_tiles(obs, tile_size)
    logger.info(
        "Classifying %d locations in %d tiles (workers=%s, executor=%s)",
        obs["location_id"].nunique(),
        len(tiles),
        workers or 1,
        executor,
    )

    records: list[LocationRecord] = []
    if workers is None or workers <= 1:
        for tile in tiles:
            records.extend(_evaluate_tile(tile, config))
    else:
        pool_cls = (
            concurrent.futures.ThreadPoolExecutor
            if executor == "thread"
            else concurrent.futures.ProcessPoolExecutor
        )
        with pool_cls(max_workers=workers) as pool:
            futures = [pool.submit(_evaluate_tile, tile, config) for tile in tiles]
            for future in concurrent.futures.as_completed(futures):
                records.extend(future.result())

    records.sort(key=lambda record: record.location_id)
    logger.info("Classified %d locations", len(records))
    return records


def record_to_dict(record: LocationRecord) -> dict[str, object]:
    row = asdict(record)
    for key in ("baseline_state", "current_state", "trend_class", "change_class"):
        row[key] = getattr(record, key).name.lower() if getattr(record, key) is not None else None
    change = record.change_class
    row["change_code"] = int(change) if change is not None else None
    row["change_label"] = change.label if change is not None else None
    return row


RECORD_COLUMNS = [
    "location_id",
    "x",
    "y",
    "obs_count",
    "baseline_composite",
    "current_composite",
    "baseline_state",
    "current_state",
    "slope",
    "intercept",
    "trend_class",
    "change_class",
    "change_code",
    "change_label",
    "establishment_epoch",
    "epoch_status",
    "projected_years",
    "projection_status",
]


def records_to_frame(records: list[LocationRecord]) -> pd.DataFrame:
    df = pd.DataFrame([record_to_dict(record) for record in records], columns=RECORD_COLUMNS)
    for col in ("x", "y", "baseline_composite", "current_composite", "slope", "intercept", "projected_years"):
        df[col] = df[col].astype("Float64")
    for col in ("change_code", "establishment_epoch"):
        df[col] = df[col].astype("Int64")
    for col in ("baseline_state", "current_state", "trend_class", "change_class", "change_label"):
        df[col] = df[col].astype("string")
    df["obs_count"] = df["obs_count"].astype(int)
    return df


def summarize_changes(records: list[LocationRecord]) -> pd.DataFrame:
    """Location count and share per change class, plus a no-data row."""

    labels = [r.change_class.label if r.change_class is not None else "No data" for r in records]
    order = [c.label for c in ChangeClass] + ["No data"]
    counts = pd.Series(labels, dtype="object").value_counts().reindex(order, fill_value=0)
    total = max(len(records), 1)
    summary = counts.rename("locations").rename_axis("change_label").reset_index()
    summary["share"] = summary["locations"] / total
    return summary


def lookup_location(
    obs_df: pd.DataFrame,
    location_id: str,
    config: ChangeConfig = DEFAULT_CONFIG,
) -> LocationRecord:
    """Evaluate a single location without touching the rest of the grid."""

    rows = obs_df[obs_df["location_id"].astype(str) == str(location_id)]
    if rows.empty:
        raise KeyError(f"location_id not found: {location_id}")
    obs = prepare_observations(rows)
    return evaluate_location(str(location_id), obs, config)


def nearest_location_id(obs_df: pd.DataFrame, x: float, y: float) -> str:
    if not {"x", "y"} <= set(obs_df.columns):
        raise ValueError("Observation table has no x/y coordinates.")
    coords = obs_df.groupby(obs_df["location_id"].astype(str))[["x", "y"]].first()
    if coords.empty:
        raise KeyError("Observation table has no locations.")
    dist2 = (coords["x"].astype(float) - x) ** 2 + (coords["y"].astype(float) - y) ** 2
    return str(dist2.idxmin())


def _fmt(value: float | None, digits: int = 3) -> str:
    return f"{value:.{digits}f}" if value is not None else "N/A"


def describe_location(record: LocationRecord, config: ChangeConfig = DEFAULT_CONFIG) -> list[str]:
    """Text summary of one location, as shown by a point inspector."""

    slope_text = f"{record.slope * 1000:.3f} x10^-3/yr" if record.slope is not None else "N/A"
    lines = [
        f"Location: {record.location_id}",
        f"Current NDVI: {_fmt(record.current_composite)}",
        f"Trend Slope: {slope_text}",
        f"Baseline State: {record.baseline_state.label if record.baseline_state is not None else 'Unknown'}",
        f"Current State: {record.current_state.label if record.current_state is not None else 'Unknown'}",
        f"Trend: {record.trend_class.label if record.trend_class is not None else 'Unknown'}",
    ]
    if record.change_class is None:
        lines.append("No data for change classification")
        return lines
    if record.change_class == ChangeClass.NONE:
        lines.append("No significant change detected")
        return lines

    lines.append(f"Change: {record.change_class.label}")
    if record.establishment_epoch is not None:
        epoch = epoch_for_label(record.establishment_epoch, config)
        end_year = epoch.end_year if epoch is not None else record.establishment_epoch
        lines.append(f"Establishment Epoch: {record.establishment_epoch}-{end_year}")
    if record.projection_status == PROJECTED and record.projected_years is not None:
        lines.append(f"Projected years to dense canopy: ~{round(record.projected_years)}")
    elif record.projection_status == INDETERMINATE:
        lines.append(f"Projected years to dense canopy: >{config.max_projection_years:g}")
    return lines


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix == ".csv":
        return pd.read_csv(path)
    raise ValueError(f"Unsupported input format for {path}. Use .parquet or .csv")


def _write_table(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        df.to_parquet(path, index=False)
        return
    if suffix == ".csv":
        df.to_csv(path, index=False)
        return
    raise ValueError(f"Unsupported output format for {path}. Use .parquet or .csv")


def run(
    input_path: Path,
    output_path: Path,
    config: ChangeConfig = DEFAULT_CONFIG,
    boundary_path: Path | None = None,
    workers: int | None = None,
    tile_size: int = 256,
    executor: str = "process",
    crs: str | None = None,
) -> list[LocationRecord]:
    """Read, select, classify and write. ``crs`` is the CRS of the x/y columns."""

    obs = _read_table(input_path)
    boundary = load_boundary(boundary_path, crs=crs) if boundary_path is not None else None
    obs = select_locations(obs, boundary)
    records = classify_grid(obs, config, workers=workers, tile_size=tile_size, executor=executor)
    _write_table(records_to_frame(records), output_path)
    return records


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Classify per-location canopy change from NDVI observations.")
    parser.add_argument("--input", required=True, help="Input observation table (.parquet or .csv)")
    parser.add_argument("--output", required=True, help="Output location table (.parquet or .csv)")
    parser.add_argument("--config", default=None, help="Optional JSON file of configuration overrides")
    parser.add_argument("--boundary", default=None, help="Optional region boundary (GeoJSON/Shapefile/GPKG)")
    parser.add_argument(
        "--crs",
        default=None,
        help="CRS of the x/y columns (e.g. EPSG:32633); the boundary is reprojected to it",
    )
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--tile-size", type=int, default=256)
    parser.add_argument("--executor", default="process", choices=["thread", "process"])
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Rejects a bad configuration before any observation is read.
    config = load_config(args.config)
    output_path = Path(args.output)
    records = run(
        Path(args.input),
        output_path,
        config=config,
        boundary_path=Path(args.boundary) if args.boundary else None,
        workers=args.workers,
        tile_size=args.tile_size,
        executor=args.executor,
        crs=args.crs,
    )

    print(f"Wrote {len(records)} locations to {output_path}")
    for row in summarize_changes(records).itertuples(index=False):
        print(f"  {row.change_label}: {row.locations}")


if __name__ == "__main__":
    main()
