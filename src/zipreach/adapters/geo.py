# src/zipreach/adapters/geo.py
from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import ArrayLike

Ring = Sequence[Sequence[float]]


def outer_ring(isochrone: Any) -> np.ndarray:
    """
    Pull the outer ring ([lon, lat] rows) out of whatever GeoJSON shape the
    isochrone provider returned.

    Accepts a FeatureCollection (first feature wins), a Feature, a Polygon or
    MultiPolygon geometry (first polygon), or a bare list of [lon, lat] points.
    Holes are ignored; isochrones are single simple polygons in practice.
    """
    geom = isochrone
    if isinstance(geom, dict):
        kind = geom.get("type")
        if kind == "FeatureCollection":
            features = geom.get("features") or []
            if not features:
                return np.empty((0, 2), dtype=float)
            geom = features[0]
            if not isinstance(geom, dict):
                raise ValueError("isochrone features must be GeoJSON objects")
            kind = geom.get("type")
        if kind == "Feature":
            geom = geom.get("geometry") or {}
            if not isinstance(geom, dict):
                raise ValueError("isochrone feature geometry must be a GeoJSON object")
            kind = geom.get("type")
        coords = geom.get("coordinates") or []
        if kind == "MultiPolygon":
            coords = coords[0] if coords else []
        elif kind != "Polygon":
            raise ValueError(f"isochrone must be a Polygon or MultiPolygon, got {kind!r}")
        ring = coords[0] if coords else []
    else:
        ring = geom

    arr = np.asarray(ring, dtype=float)
    if arr.size == 0:
        return np.empty((0, 2), dtype=float)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise ValueError("ring must be a sequence of [lon, lat] points")
    return arr[:, :2]


def points_in_polygon(lons: ArrayLike, lats: ArrayLike, ring: ArrayLike) -> np.ndarray:
    """
    Vectorised even-odd ray cast. Returns a boolean mask over the points.

    The ring may be open or closed (first point repeated).
    """
    x = np.asarray(lons, dtype=float)
    y = np.asarray(lats, dtype=float)
    poly = np.asarray(ring, dtype=float)

    inside = np.zeros(x.shape, dtype=bool)
    if poly.shape[0] < 3 or x.size == 0:
        return inside

    xs = poly[:, 0]
    ys = poly[:, 1]
    n = poly.shape[0]
    with np.errstate(divide="ignore", invalid="ignore"):
        for i in range(n):
            j = i - 1  # wraps to the last vertex for i == 0
            xi, yi, xj, yj = xs[i], ys[i], xs[j], ys[j]
            straddles = (yi > y) != (yj > y)
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            inside ^= straddles & (x < x_cross)
    return inside
