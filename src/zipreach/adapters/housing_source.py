# src/zipreach/adapters/housing_source.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from zipreach.adapters.cache import LRUCache
from zipreach.adapters.config import config
from zipreach.adapters.logging_utils import bind, get_logger
from zipreach.domain.ports import HousingDataProvider, HousingDataset, parse_centroids, parse_housing_table

logger = get_logger(__name__)


def build_default_cache() -> LRUCache:
    return LRUCache(max_entries=config.CACHE_MAX_ENTRIES, default_ttl=config.CACHE_TTL_SECONDS)


class JsonHousingDataSource(HousingDataProvider):
    """
    Reads the prepared housing table and centroid table from disk.

    Parsed tables are kept in the injected cache keyed by file path, so one
    source (and one cache) per process serves every request.
    """

    def __init__(
        self,
        housing_path: Path | str | None = None,
        centroids_path: Path | str | None = None,
        *,
        cache: Optional[LRUCache] = None,
        allow_missing: Optional[bool] = None,
    ) -> None:
        data_dir = Path(config.DATA_DIR)
        self.housing_path = Path(housing_path) if housing_path else data_dir / config.HOUSING_DATA_FILE
        self.centroids_path = Path(centroids_path) if centroids_path else data_dir / config.CENTROIDS_FILE
        self.cache = cache if cache is not None else build_default_cache()
        self.allow_missing = config.ALLOW_MISSING_DATA if allow_missing is None else allow_missing
        self.log = bind(logger, housing_path=str(self.housing_path), centroids_path=str(self.centroids_path))

    def _read_json(self, path: Path, empty: Any) -> Any:
        if not path.exists():
            if not self.allow_missing:
                raise FileNotFoundError(f"{path} not found. Build it with `python -m entrypoints.cli.pipeline build-data`.")
            self.log.warning("dataset_missing", extra={"context": {"missing": str(path)}})
            return empty
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def _load_housing(self):
        raw = self._read_json(self.housing_path, {})
        records, meta = parse_housing_table(raw)
        self.log.info("housing_table_loaded", extra={"context": {"zips": len(records)}})
        return records, meta

    def _load_centroids(self):
        raw = self._read_json(self.centroids_path, {"type": "FeatureCollection", "features": []})
        centroids = parse_centroids(raw)
        self.log.info("centroid_table_loaded", extra={"context": {"centroids": len(centroids)}})
        return centroids

    def _build_dataset(self) -> HousingDataset:
        records, meta = self.cache.get_or_load(f"housing:{self.housing_path}", self._load_housing)
        centroids = self.cache.get_or_load(f"centroids:{self.centroids_path}", self._load_centroids)
        return HousingDataset(records=records, centroids=centroids, meta=meta)

    def load(self) -> HousingDataset:
        # the dataset itself is cached too so its centroid arrays are built once
        key = f"dataset:{self.housing_path}|{self.centroids_path}"
        return self.cache.get_or_load(key, self._build_dataset)
