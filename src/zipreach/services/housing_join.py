# src/zipreach/services/housing_join.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from zipreach.adapters.geo import outer_ring, points_in_polygon
from zipreach.adapters.logging_utils import get_logger
from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.housing import HousingDataEntry, HousingStats, ZipCentroid, ZipMarker, ZipRecord
from zipreach.domain.metrics import build_stats
from zipreach.domain.ports import HousingDataset
from zipreach.services.results import build_zip_markers

logger = get_logger(__name__)


def make_entry(centroid: ZipCentroid, record: Optional[ZipRecord]) -> HousingDataEntry:
    """
    Join one centroid with its raw record. A ZIP with geography but no
    housing row still produces an entry, just with null housing fields.
    """
    if record is None:
        return HousingDataEntry(
            zip=centroid.zip,
            lat=centroid.lat,
            lon=centroid.lon,
            median_home_value=None,
            median_rent=None,
        )
    return HousingDataEntry(
        zip=centroid.zip,
        lat=centroid.lat,
        lon=centroid.lon,
        median_home_value=record.median_home_value,
        median_rent=record.median_rent,
        name=record.name,
        state=record.state,
        land_share_pct=record.land_share_pct,
        land_value_per_acre=record.land_value_per_acre,
        appreciation_5yr=record.appreciation_5yr,
        fmr=record.fmr,
    )


def join_isochrone(dataset: HousingDataset, isochrone: Any) -> list[HousingDataEntry]:
    """
    Entries for every ZIP centroid that falls inside the isochrone's outer
    ring, in centroid-table order.
    """
    if dataset.is_empty:
        return []

    ring = outer_ring(isochrone)
    zips, lons, lats = dataset.centroid_arrays
    mask = points_in_polygon(lons, lats, ring)
    centroids = dataset.centroids

    entries = [
        make_entry(centroids[i], dataset.records.get(zips[i]))
        for i in np.flatnonzero(mask)
    ]
    logger.info(
        "isochrone_join",
        extra={"context": {"centroids": len(zips), "matched": len(entries), "ring_points": int(ring.shape[0])}},
    )
    return entries


def join_nationwide(dataset: HousingDataset) -> list[HousingDataEntry]:
    """
    One entry per raw record that has a centroid.

    Records without a centroid are dropped from all nationwide output even
    when they carry state and price data; coverage follows the centroid table.
    """
    centroid_map = dataset.centroid_map
    entries: list[HousingDataEntry] = []
    dropped = 0
    for zip_code, record in dataset.records.items():
        centroid = centroid_map.get(zip_code)
        if centroid is None:
            dropped += 1
            continue
        entries.append(make_entry(centroid, record))

    if dropped:
        logger.info(
            "nationwide_join_missing_centroids",
            extra={"context": {"records": len(dataset.records), "dropped": dropped}},
        )
    return entries


def housing_for_isochrone(dataset: HousingDataset, isochrone: Any) -> HousingStats:
    return build_stats(join_isochrone(dataset, isochrone), meta=dataset.meta)


@dataclass
class CommuteResult:
    stats: HousingStats
    markers: list[ZipMarker]


def affordable_for_isochrone(
    dataset: HousingDataset,
    isochrone: Any,
    inputs: AffordabilityInputs,
) -> CommuteResult:
    """
    Isochrone join plus classification. Stats keep every matched entry;
    markers leave out ZIPs whose tier is unknown.
    """
    stats = housing_for_isochrone(dataset, isochrone)
    return CommuteResult(stats=stats, markers=build_zip_markers(stats.entries, inputs))
