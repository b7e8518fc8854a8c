# src/zipreach/adapters/zillow_csv.py
from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from zipreach.adapters.logging_utils import get_logger
from zipreach.domain.ports import META_KEY

logger = get_logger(__name__)

DATE_COL_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
APPRECIATION_MONTHS = 60


def read_zillow_csv(path: Path | str) -> pd.DataFrame:
    """Zillow research CSV (ZHVI / ZORI), one row per ZIP, one column per month."""
    return pd.read_csv(path, dtype={"RegionName": str, "State": str, "City": str})


def date_columns(df: pd.DataFrame) -> list[str]:
    return [c for c in df.columns if re.match(DATE_COL_PATTERN, str(c))]


def _monthly_frame(df: pd.DataFrame) -> pd.DataFrame:
    cols = date_columns(df)
    return df[cols].apply(pd.to_numeric, errors="coerce")


def latest_values(df: pd.DataFrame) -> pd.Series:
    """Most recent non-blank monthly value per row (NaN if the row is empty)."""
    monthly = _monthly_frame(df)
    if monthly.shape[1] == 0:
        return pd.Series(np.nan, index=df.index)
    return monthly.ffill(axis=1).iloc[:, -1]


def appreciation_pct(df: pd.DataFrame, months: int = APPRECIATION_MONTHS) -> pd.Series:
    """
    Percent change to each row's latest non-blank value from the value
    ``months`` columns before that same month. NaN when the history is too
    short or the baseline is blank or non-positive.
    """
    vals = _monthly_frame(df).to_numpy(dtype=float)
    out = np.full(len(df), np.nan)
    if vals.shape[1] == 0:
        return pd.Series(out, index=df.index)

    present = ~np.isnan(vals)
    last_idx = vals.shape[1] - 1 - np.argmax(present[:, ::-1], axis=1)
    past_idx = last_idx - months
    rows = np.flatnonzero(present.any(axis=1) & (past_idx >= 0))

    latest = vals[rows, last_idx[rows]]
    past = vals[rows, past_idx[rows]]
    with np.errstate(divide="ignore", invalid="ignore"):
        pct = (latest / past - 1.0) * 100.0
    out[rows] = np.where(past > 0, pct, np.nan)
    return pd.Series(out, index=df.index).round(1)


def _zip_keys(df: pd.DataFrame) -> pd.Series:
    return df["RegionName"].astype(str).str.strip().str.zfill(5)


def _none_if_nan(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, float) and np.isnan(v):
        return None
    return float(v)


def build_housing_table(
    zhvi: pd.DataFrame | None,
    zori: pd.DataFrame | None,
    *,
    fetched_at: str | None = None,
) -> dict[str, Any]:
    """
    Merge ZHVI (home values) and ZORI (rents) into the raw housing table:
    ``{"_meta": {...}, "<zip>": {state, name, medianHomeValue, medianRent, appreciation5yr}}``.

    State and city come from ZHVI first; ZORI only fills ZIPs ZHVI lacks.
    """
    home: dict[str, float | None] = {}
    rent: dict[str, float | None] = {}
    appreciation: dict[str, float | None] = {}
    states: dict[str, str] = {}
    names: dict[str, str] = {}
    zhvi_date = zori_date = None

    for df, target, is_zhvi in ((zhvi, home, True), (zori, rent, False)):
        if df is None or df.empty:
            continue
        cols = date_columns(df)
        if cols:
            if is_zhvi:
                zhvi_date = cols[-1]
            else:
                zori_date = cols[-1]

        zips = _zip_keys(df)
        values = latest_values(df)
        growth = appreciation_pct(df) if is_zhvi else None
        state_col = df["State"].fillna("") if "State" in df.columns else pd.Series("", index=df.index)
        city_col = df["City"].fillna("") if "City" in df.columns else pd.Series("", index=df.index)

        for idx, zip_code in zips.items():
            if len(zip_code) != 5:
                continue
            target[zip_code] = _none_if_nan(values.loc[idx])
            if growth is not None:
                appreciation[zip_code] = _none_if_nan(growth.loc[idx])
            if zip_code in states:
                continue
            state = str(state_col.loc[idx] or "").strip().upper()
            city = str(city_col.loc[idx] or "").strip()
            if state:
                states[zip_code] = state
                if city:
                    names[zip_code] = f"{city}, {state}"

        logger.info(
            "zillow_table_parsed",
            extra={"context": {"kind": "zhvi" if is_zhvi else "zori", "rows": len(df), "latest": cols[-1] if cols else None}},
        )

    table: dict[str, Any] = {
        META_KEY: {
            "zhviDate": zhvi_date,
            "zoriDate": zori_date,
            "fetchedAt": fetched_at or date.today().isoformat(),
        }
    }
    for zip_code in sorted(set(home) | set(rent)):
        rec: dict[str, Any] = {}
        if zip_code in states:
            rec["state"] = states[zip_code]
        if zip_code in names:
            rec["name"] = names[zip_code]
        rec["medianHomeValue"] = home.get(zip_code)
        rec["medianRent"] = rent.get(zip_code)
        if appreciation.get(zip_code) is not None:
            rec["appreciation5yr"] = appreciation[zip_code]
        table[zip_code] = rec
    return table


def parse_gazetteer(path: Path | str) -> dict[str, Any]:
    """
    Census ZCTA Gazetteer (tab-delimited) → centroid FeatureCollection.

    GEOID is the first column, INTPTLAT / INTPTLONG the last two.
    """
    df = pd.read_csv(path, sep="\t", dtype=str)
    df.columns = [c.strip() for c in df.columns]
    if df.shape[1] < 3:
        raise ValueError(f"{path} does not look like a Gazetteer file")

    geoid = df.iloc[:, 0].astype(str).str.strip().str.zfill(5)
    lat = pd.to_numeric(df.iloc[:, -2].str.strip(), errors="coerce")
    lon = pd.to_numeric(df.iloc[:, -1].str.strip(), errors="coerce")
    ok = geoid.str.len().eq(5) & lat.notna() & lon.notna()

    features = [
        {
            "type": "Feature",
            "properties": {"ZCTA5CE20": z},
            "geometry": {"type": "Point", "coordinates": [float(x), float(y)]},
        }
        for z, y, x in zip(geoid[ok], lat[ok], lon[ok])
    ]
    logger.info("gazetteer_parsed", extra={"context": {"path": str(path), "centroids": len(features)}})
    return {"type": "FeatureCollection", "features": features}
