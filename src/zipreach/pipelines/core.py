# src/zipreach/pipelines/core.py

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from loguru import logger

from zipreach.adapters.config import config
from zipreach.adapters.housing_source import JsonHousingDataSource
from zipreach.adapters.zillow_csv import build_housing_table, parse_gazetteer, read_zillow_csv
from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.ports import HousingDataProvider
from zipreach.services.housing_join import CommuteResult, affordable_for_isochrone
from zipreach.services.state_aggregation import NationwideResult, affordable_nationwide

DATA_DIR = Path(config.DATA_DIR)
REPORTS_DIR = DATA_DIR / "reports"


# ---------------------------
# 1. RAW TABLES
# ---------------------------

def build_data(
    zhvi_csv: Optional[Path],
    zori_csv: Optional[Path],
    gazetteer_txt: Optional[Path],
    out_dir: Path = DATA_DIR,
    fetched_at: Optional[str] = None,
) -> dict[str, Path]:
    """
    Turn already-downloaded Zillow / Census files into the two JSON tables
    the join layer reads. Downloading them is up to the caller.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written: dict[str, Path] = {}

    if zhvi_csv is None and zori_csv is None:
        logger.warning("No ZHVI or ZORI CSV given; skipping housing table")
    else:
        zhvi = read_zillow_csv(zhvi_csv) if zhvi_csv else None
        zori = read_zillow_csv(zori_csv) if zori_csv else None
        table = build_housing_table(zhvi, zori, fetched_at=fetched_at)
        housing_path = out_dir / config.HOUSING_DATA_FILE
        housing_path.write_text(json.dumps(table))
        written["housing"] = housing_path
        n_with_state = sum(1 for k, v in table.items() if k != "_meta" and v.get("state"))
        logger.info(
            "Wrote housing table",
            path=str(housing_path),
            zips=len(table) - 1,
            zips_with_state=n_with_state,
        )

    if gazetteer_txt is not None:
        centroids = parse_gazetteer(gazetteer_txt)
        centroid_path = out_dir / config.CENTROIDS_FILE
        centroid_path.write_text(json.dumps(centroids))
        written["centroids"] = centroid_path
        logger.info("Wrote centroid table", path=str(centroid_path), centroids=len(centroids["features"]))

    return written


# ---------------------------
# 2. AFFORDABILITY RUNS
# ---------------------------

def states_frame(result: NationwideResult) -> pd.DataFrame:
    cols = [
        "state", "state_name", "total_zips", "affordable_count", "stretch_count",
        "unaffordable_count", "pct_affordable", "median_home_value", "median_rent",
    ]
    return pd.DataFrame([asdict(s) for s in result.states], columns=cols)


def _write_report(name: str, payload: Any) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    path = REPORTS_DIR / name
    path.write_text(json.dumps(payload, indent=2, default=str))
    return path


def run_nationwide(
    inputs: AffordabilityInputs,
    source: Optional[HousingDataProvider] = None,
    write_report: bool = True,
) -> NationwideResult:
    source = source or JsonHousingDataSource()
    result = affordable_nationwide(source.load(), inputs)

    logger.info(
        "Nationwide affordability computed",
        states=len(result.states),
        zips=len(result.all_entries),
        median_home_value=result.stats.median_home_value,
    )

    if write_report:
        frame = states_frame(result)
        REPORTS_DIR.mkdir(parents=True, exist_ok=True)
        csv_path = REPORTS_DIR / "nationwide_states.csv"
        frame.to_csv(csv_path, index=False)
        json_path = _write_report(
            "nationwide_states.json",
            {"inputs": inputs.model_dump(), "states": frame.to_dict(orient="records")},
        )
        logger.info("Nationwide report written", csv=str(csv_path), json=str(json_path))

    return result


def run_commute(
    inputs: AffordabilityInputs,
    isochrone_path: Path,
    source: Optional[HousingDataProvider] = None,
    write_report: bool = True,
) -> CommuteResult:
    if not isochrone_path.exists():
        raise FileNotFoundError(f"{isochrone_path} not found. Export the isochrone polygon as GeoJSON first.")

    isochrone = json.loads(isochrone_path.read_text())
    source = source or JsonHousingDataSource()
    result = affordable_for_isochrone(source.load(), isochrone, inputs)

    tiers = pd.Series([m.tier for m in result.markers], dtype="object").value_counts().to_dict()
    logger.info(
        "Commute-zone affordability computed",
        isochrone=str(isochrone_path),
        zips=result.stats.zip_count,
        tiers=tiers,
    )

    if write_report:
        _write_report(
            "commute_markers.json",
            {"inputs": inputs.model_dump(), "markers": [asdict(m) for m in result.markers]},
        )

    return result
