# src/zipreach/domain/ports.py
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Mapping, Optional, Protocol

import numpy as np

from zipreach.domain.housing import DataMeta, ZipCentroid, ZipRecord

META_KEY = "_meta"


# ----------------------------
# In-memory raw tables
# ----------------------------

@dataclass
class HousingDataset:
    """
    The three raw inputs the join layer needs, already resolved in memory:
    the per-ZIP housing table, the ZIP centroid table and the data vintage.
    """
    records: dict[str, ZipRecord] = field(default_factory=dict)
    centroids: list[ZipCentroid] = field(default_factory=list)
    meta: Optional[DataMeta] = None

    @property
    def is_empty(self) -> bool:
        return not self.records or not self.centroids

    @cached_property
    def centroid_map(self) -> dict[str, ZipCentroid]:
        return {c.zip: c for c in self.centroids}

    @cached_property
    def centroid_arrays(self) -> tuple[list[str], np.ndarray, np.ndarray]:
        """(zips, lons, lats) in centroid-table order, for vectorised geometry."""
        zips = [c.zip for c in self.centroids]
        lons = np.asarray([c.lon for c in self.centroids], dtype=float)
        lats = np.asarray([c.lat for c in self.centroids], dtype=float)
        return zips, lons, lats


def parse_housing_table(raw: Mapping[str, Any]) -> tuple[dict[str, ZipRecord], Optional[DataMeta]]:
    """
    Split a raw ``zip -> record`` mapping into records and its ``_meta`` entry.

    The input mapping is not modified.
    """
    meta_raw = raw.get(META_KEY)
    meta = DataMeta.model_validate(meta_raw) if isinstance(meta_raw, Mapping) else None
    records = {
        str(zip_code).zfill(5): ZipRecord.model_validate(rec)
        for zip_code, rec in raw.items()
        if zip_code != META_KEY and isinstance(rec, Mapping)
    }
    return records, meta


def parse_centroids(raw: Any) -> list[ZipCentroid]:
    """
    Accept either a GeoJSON FeatureCollection of Points keyed by
    ``properties.ZCTA5CE20`` or a plain list of {zip, lat, lon}.
    """
    if isinstance(raw, Mapping) and raw.get("type") == "FeatureCollection":
        out: list[ZipCentroid] = []
        for feat in raw.get("features") or []:
            props = feat.get("properties") or {}
            geom = feat.get("geometry") or {}
            zip_code = props.get("ZCTA5CE20") or props.get("zip")
            coords = geom.get("coordinates") or []
            if not zip_code or len(coords) < 2:
                continue
            lon, lat = coords[0], coords[1]
            out.append(ZipCentroid(zip=zip_code, lat=lat, lon=lon))
        return out
    return [ZipCentroid.model_validate(c) for c in (raw or [])]


# ----------------------------
# Data provider interface
# ----------------------------

class HousingDataProvider(Protocol):
    def load(self) -> HousingDataset:
        ...
