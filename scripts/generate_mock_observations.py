"""Generate synthetic per-location red/NIR observation tables for local testing."""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np
import pandas as pd


# (start NDVI, end NDVI) per trajectory archetype.
ARCHETYPES: dict[str, tuple[float, float]] = {
    "establishment": (0.15, 0.70),
    "loss": (0.70, 0.12),
    "densification": (0.63, 0.90),
    "emerging": (0.25, 0.52),
    "thickening": (0.42, 0.70),
    "thinning": (0.70, 0.42),
    "stable_sparse": (0.30, 0.30),
}


def reflectance_for_ndvi(ndvi: float, red: float) -> tuple[float, float]:
    """NIR/red pair whose normalized difference equals ``ndvi``."""

    nir = red * (1.0 + ndvi) / (1.0 - ndvi)
    return nir, red


def build_mock_observations(
    locations: int = 70,
    start_year: int = 1985,
    end_year: int = 2025,
    grid_width: int = 10,
) -> pd.DataFrame:
    rng = np.random.default_rng(42)
    names = list(ARCHETYPES)
    years = np.arange(start_year, end_year + 1)

    rows: list[dict[str, object]] = []
    for loc in range(locations):
        archetype = names[loc % len(names)]
        start_ndvi, end_ndvi = ARCHETYPES[archetype]
        location_id = f"loc_{loc:05d}"
        x = float(loc % grid_width) * 30.0
        y = float(loc // grid_width) * 30.0

        for year in years:
            frac = (year - start_year) / max(end_year - start_year, 1)
            center = start_ndvi + (end_ndvi - start_ndvi) * frac
            for month in (1, 6, 7, 8, 9):
                seasonal = -0.15 if month == 1 else 0.0
                ndvi = float(np.clip(center + seasonal + rng.normal(0.0, 0.02), -0.2, 0.95))
                nir, red = reflectance_for_ndvi(ndvi, rng.uniform(0.03, 0.08))
                rows.append(
                    {
                        "location_id": location_id,
                        "archetype": archetype,
                        "x": x,
                        "y": y,
                        "date": pd.Timestamp(year=int(year), month=month, day=int(rng.integers(1, 28))),
                        "nir": nir,
                        "red": red,
                        "is_valid": int(rng.random() > 0.1),
                    }
                )

    return pd.DataFrame(rows)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", required=True, help="Output .parquet or .csv file")
    parser.add_argument("--locations", type=int, default=70)
    parser.add_argument("--start-year", type=int, default=1985)
    parser.add_argument("--end-year", type=int, default=2025)
    args = parser.parse_args()

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)

    df = build_mock_observations(args.locations, args.start_year, args.end_year)
    if out.suffix.lower() == ".parquet":
        df.to_parquet(out, index=False)
    elif out.suffix.lower() == ".csv":
        df.to_csv(out, index=False)
    else:
        raise ValueError("Output must end with .parquet or .csv")

    print(f"Wrote mock observation table: {out} ({len(df)} rows)")


if __name__ == "__main__":
    main()
