# src/zipreach/services/results.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Literal, Optional, Sequence

from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.housing import HousingDataEntry, HousingStats, ZipMarker
from zipreach.domain.mortgage import calculate_max_home_price, get_affordability_tier

SortKey = Literal["zip", "name", "median_home_value", "median_rent"]


def build_zip_markers(
    entries: Iterable[HousingDataEntry],
    inputs: AffordabilityInputs,
) -> list[ZipMarker]:
    """Map markers for every entry with a known tier."""
    markers: list[ZipMarker] = []
    for e in entries:
        tier = get_affordability_tier(e.median_home_value, inputs)
        if tier == "unknown":
            continue
        markers.append(
            ZipMarker(
                lat=e.lat,
                lon=e.lon,
                zip=e.zip,
                tier=tier,
                median_home_value=e.median_home_value,
                median_rent=e.median_rent,
            )
        )
    return markers


def visible_markers(markers: Sequence[ZipMarker], show_unaffordable: bool = True) -> list[ZipMarker]:
    """
    The "hide unaffordable" toggle. Pure filter over markers that already
    carry their tier; nothing is reclassified.
    """
    if show_unaffordable:
        return list(markers)
    return [m for m in markers if m.tier != "unaffordable"]


def visible_entries(
    entries: Sequence[HousingDataEntry],
    inputs: AffordabilityInputs,
    show_unaffordable: bool = True,
) -> list[HousingDataEntry]:
    """Table rows under the same toggle; hidden mode keeps affordable and stretch only."""
    if show_unaffordable or not inputs.has_income:
        return list(entries)
    return [
        e for e in entries
        if get_affordability_tier(e.median_home_value, inputs) in ("affordable", "stretch")
    ]


def sort_entries(
    entries: Sequence[HousingDataEntry],
    key: SortKey = "median_home_value",
    descending: bool = False,
) -> list[HousingDataEntry]:
    """Sort for table display; rows missing the key always sink to the bottom."""
    present = [e for e in entries if getattr(e, key) is not None]
    missing = [e for e in entries if getattr(e, key) is None]
    present.sort(key=lambda e: getattr(e, key), reverse=descending)
    return present + missing


def format_currency(value: Optional[float], null_display: str = "N/A") -> str:
    if value is None:
        return null_display
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


@dataclass
class HousingSummary:
    zip_count: int
    zips_with_data: int
    median_home_value: Optional[float]
    median_rent: Optional[float]
    max_home_price: Optional[int]
    affordable_count: Optional[int]
    data_date: Optional[str]
    fetched_at: Optional[str]

    @property
    def data_month(self) -> Optional[str]:
        """'Mar 2025' style label for the data vintage."""
        if not self.data_date:
            return None
        try:
            return date.fromisoformat(self.data_date).strftime("%b %Y")
        except ValueError:
            return None


def summarize(stats: HousingStats, inputs: Optional[AffordabilityInputs] = None) -> HousingSummary:
    """
    Figures behind the summary cards. Max price and affordable count are
    only present when an income has been entered.
    """
    has_income = inputs is not None and inputs.has_income
    meta = stats.meta
    affordable = None
    if has_income:
        affordable = sum(
            1 for e in stats.entries
            if get_affordability_tier(e.median_home_value, inputs) == "affordable"
        )
    return HousingSummary(
        zip_count=stats.zip_count,
        zips_with_data=stats.coverage,
        median_home_value=stats.median_home_value,
        median_rent=stats.median_rent,
        max_home_price=calculate_max_home_price(inputs) if has_income else None,
        affordable_count=affordable,
        data_date=(meta.zhvi_date or meta.zori_date) if meta else None,
        fetched_at=meta.fetched_at if meta else None,
    )
