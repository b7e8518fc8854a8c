# src/zipreach/domain/housing.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from zipreach.domain.affordability import AffordabilityTier, MarkerTier


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class FairMarketRent(_CamelModel):
    """HUD fair market rent by bedroom count (br0 = studio)."""
    br0: float | None = None
    br1: float | None = None
    br2: float | None = None
    br3: float | None = None
    br4: float | None = None


class ZipRecord(_CamelModel):
    """One row of the raw per-ZIP housing table. Source of truth, never mutated."""
    name: str | None = None
    state: str | None = None
    median_home_value: float | None = None
    median_rent: float | None = None
    land_share_pct: float | None = None
    land_value_per_acre: float | None = None
    appreciation_5yr: float | None = None
    fmr: FairMarketRent | None = None

    @field_validator("state", mode="before")
    @classmethod
    def _upper_state(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


class ZipCentroid(_CamelModel):
    zip: str
    lat: float
    lon: float

    @field_validator("zip", mode="before")
    @classmethod
    def _zero_pad(cls, v):
        return str(v).strip().zfill(5)


class DataMeta(_CamelModel):
    """Data vintage; passed through to HousingStats untouched."""
    zhvi_date: str | None = None
    zori_date: str | None = None
    aei_year: str | None = None
    fetched_at: str | None = None


@dataclass
class HousingDataEntry:
    zip: str
    lat: float
    lon: float
    median_home_value: Optional[float]
    median_rent: Optional[float]
    name: Optional[str] = None
    state: Optional[str] = None
    land_share_pct: Optional[float] = None
    land_value_per_acre: Optional[float] = None
    appreciation_5yr: Optional[float] = None
    fmr: Optional[FairMarketRent] = None


@dataclass
class HousingStats:
    zip_count: int
    median_home_value: Optional[float]
    median_rent: Optional[float]
    min_home_value: Optional[float]
    max_home_value: Optional[float]
    min_rent: Optional[float]
    max_rent: Optional[float]
    entries: list[HousingDataEntry] = field(default_factory=list)
    meta: Optional[DataMeta] = None

    # Land / appreciation medians (same rule as home values)
    median_land_share_pct: Optional[float] = None
    median_land_value_per_acre: Optional[float] = None
    median_appreciation_5yr: Optional[float] = None

    @property
    def coverage(self) -> int:
        """ZIPs that actually carry a home value."""
        return sum(1 for e in self.entries if e.median_home_value is not None)


@dataclass
class StateAffordability:
    state: str               # "NY"
    state_name: str          # "New York"
    total_zips: int
    affordable_count: int
    stretch_count: int
    unaffordable_count: int
    pct_affordable: int      # 0-100
    median_home_value: Optional[float]
    median_rent: Optional[float]


@dataclass
class ZipMarker:
    lat: float
    lon: float
    zip: str
    tier: MarkerTier
    median_home_value: Optional[float] = None
    median_rent: Optional[float] = None


@dataclass
class ClassifiedEntry:
    """A joined entry paired with the tier computed for one inputs snapshot."""
    entry: HousingDataEntry
    tier: AffordabilityTier
