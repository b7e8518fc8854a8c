# src/zipreach/api/schemas.py
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from zipreach.domain.affordability import AffordabilityInputs, AffordabilityTier
from zipreach.domain.housing import HousingStats, StateAffordability, ZipMarker
from zipreach.domain.mortgage import MonthlyPayment
from zipreach.services.results import HousingSummary


# --------------------------------------------
# Mortgage math
# --------------------------------------------

class MaxPriceResponse(BaseModel):
    max_home_price: int
    effective_max_price: Optional[float] = None
    monthly_payment: Optional[MonthlyPayment] = None


class TierRequest(BaseModel):
    """
    Price to classify plus the buyer profile. Field names accept camelCase
    too, so the web client can post its state as-is.
    """
    model_config = ConfigDict(populate_by_name=True)

    home_price: Optional[float] = Field(default=None, alias="homePrice")
    inputs: AffordabilityInputs


class TierResponse(BaseModel):
    tier: AffordabilityTier
    base_tier: AffordabilityTier
    dti_ratio: Optional[float] = None
    remaining_cash_flow: Optional[float] = None
    cash_flow_pct: Optional[float] = None
    applied_rules: list[str] = Field(default_factory=list)
    monthly_payment: Optional[MonthlyPayment] = None


# --------------------------------------------
# Commute zone
# --------------------------------------------

class CommuteRequest(BaseModel):
    inputs: AffordabilityInputs
    # GeoJSON FeatureCollection / Feature / Polygon from the isochrone provider
    isochrone: dict[str, Any]
    show_unaffordable: bool = True


class CommuteResponse(BaseModel):
    stats: HousingStats
    markers: list[ZipMarker]
    summary: HousingSummary


# --------------------------------------------
# Nationwide
# --------------------------------------------

class NationwideResponse(BaseModel):
    states: list[StateAffordability]
    summary: HousingSummary


class StateDrillDownResponse(BaseModel):
    state: str
    state_name: str
    stats: HousingStats
    markers: list[ZipMarker]
    summary: HousingSummary
