from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

import numpy as np

from zipreach.domain.housing import DataMeta, HousingDataEntry, HousingStats


def round_half_up(x: float) -> int:
    """Nearest integer with .5 rounding up (Python's round() is banker's)."""
    return int(math.floor(x + 0.5))


def _present(values: Iterable[Optional[float]]) -> np.ndarray:
    """Numeric array of the non-null, non-NaN values."""
    arr = np.asarray([v for v in values if v is not None], dtype=float)
    return arr[~np.isnan(arr)]


def median(values: Iterable[Optional[float]]) -> Optional[float]:
    """
    Median of the present values; None for an empty collection.

    Works on a copy, so the caller's list is never reordered.
    """
    arr = _present(values)
    if arr.size == 0:
        return None
    return float(np.median(arr))


def _min_max(arr: np.ndarray) -> tuple[Optional[float], Optional[float]]:
    if arr.size == 0:
        return None, None
    return float(arr.min()), float(arr.max())


def build_stats(
    entries: Sequence[HousingDataEntry],
    meta: Optional[DataMeta] = None,
) -> HousingStats:
    """
    Reduction step over a set of joined entries.

    zip_count counts every entry, priced or not; each numeric summary only
    looks at entries where that field is present.
    """
    entries = list(entries)
    home_values = _present(e.median_home_value for e in entries)
    rents = _present(e.median_rent for e in entries)

    min_home, max_home = _min_max(home_values)
    min_rent, max_rent = _min_max(rents)

    return HousingStats(
        zip_count=len(entries),
        median_home_value=median(home_values),
        median_rent=median(rents),
        min_home_value=min_home,
        max_home_value=max_home,
        min_rent=min_rent,
        max_rent=max_rent,
        entries=entries,
        meta=meta,
        median_land_share_pct=median(e.land_share_pct for e in entries),
        median_land_value_per_acre=median(e.land_value_per_acre for e in entries),
        median_appreciation_5yr=median(e.appreciation_5yr for e in entries),
    )
