from typing import Any, Mapping, Optional

from zipreach.domain.ports import HousingDataProvider, HousingDataset, parse_centroids, parse_housing_table


class InMemoryHousingDataSource(HousingDataProvider):
    def __init__(
        self,
        housing: Optional[Mapping[str, Any]] = None,
        centroids: Any = None,
    ) -> None:
        records, meta = parse_housing_table(housing or {})
        self._dataset = HousingDataset(records=records, centroids=parse_centroids(centroids or []), meta=meta)
        self.loads = 0

    def load(self) -> HousingDataset:
        self.loads += 1
        return self._dataset
