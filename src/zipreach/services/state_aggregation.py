# src/zipreach/services/state_aggregation.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from zipreach.adapters.logging_utils import get_logger
from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.housing import (
    ClassifiedEntry,
    DataMeta,
    HousingDataEntry,
    HousingStats,
    StateAffordability,
    ZipMarker,
)
from zipreach.domain.metrics import build_stats, median, round_half_up
from zipreach.domain.mortgage import get_affordability_tier
from zipreach.domain.ports import HousingDataset
from zipreach.domain.states import UNKNOWN_STATE, state_name
from zipreach.services.housing_join import join_nationwide
from zipreach.services.results import build_zip_markers

logger = get_logger(__name__)


@dataclass
class StateBucket:
    state: str
    total: int = 0
    affordable: int = 0
    stretch: int = 0
    unaffordable: int = 0
    # affordable + stretch only; drives map coloring
    entries: list[HousingDataEntry] = field(default_factory=list)
    # every priced ZIP, for the state medians
    priced: list[HousingDataEntry] = field(default_factory=list)

    @property
    def pct_affordable(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(100 * (self.affordable + self.stretch) / self.total)


def classify_entries(
    entries: Iterable[HousingDataEntry],
    inputs: AffordabilityInputs,
) -> list[ClassifiedEntry]:
    return [ClassifiedEntry(entry=e, tier=get_affordability_tier(e.median_home_value, inputs)) for e in entries]


def group_by_state(classified: Iterable[ClassifiedEntry]) -> dict[str, StateBucket]:
    """
    Bucket classified entries by state, in encounter order. Entries without
    a home value land in their bucket but are not counted.
    """
    buckets: dict[str, StateBucket] = {}
    for item in classified:
        code = item.entry.state or UNKNOWN_STATE
        bucket = buckets.get(code)
        if bucket is None:
            bucket = buckets[code] = StateBucket(state=code)

        if item.entry.median_home_value is None:
            continue

        bucket.total += 1
        bucket.priced.append(item.entry)
        if item.tier == "affordable":
            bucket.affordable += 1
            bucket.entries.append(item.entry)
        elif item.tier == "stretch":
            bucket.stretch += 1
            bucket.entries.append(item.entry)
        else:
            bucket.unaffordable += 1
    return buckets


def summarize_states(buckets: dict[str, StateBucket]) -> list[StateAffordability]:
    """
    One row per real state with at least one priced ZIP, sorted by
    pct_affordable descending. sort() is stable, so ties keep encounter order.
    """
    states: list[StateAffordability] = []
    for code, bucket in buckets.items():
        if code == UNKNOWN_STATE or bucket.total == 0:
            continue
        states.append(
            StateAffordability(
                state=code,
                state_name=state_name(code),
                total_zips=bucket.total,
                affordable_count=bucket.affordable,
                stretch_count=bucket.stretch,
                unaffordable_count=bucket.unaffordable,
                pct_affordable=bucket.pct_affordable,
                median_home_value=median(e.median_home_value for e in bucket.priced),
                median_rent=median(e.median_rent for e in bucket.priced),
            )
        )
    states.sort(key=lambda s: s.pct_affordable, reverse=True)
    return states


def aggregate_states(classified: Iterable[ClassifiedEntry]) -> list[StateAffordability]:
    return summarize_states(group_by_state(classified))


@dataclass
class NationwideResult:
    states: list[StateAffordability]
    # priced, centroid-matched entries; drill-down filters these, never the raw tables
    all_entries: list[HousingDataEntry]
    stats: HousingStats
    state_entries: dict[str, list[HousingDataEntry]] = field(default_factory=dict)


def affordable_nationwide(dataset: HousingDataset, inputs: AffordabilityInputs) -> NationwideResult:
    """Every ZIP in the country, classified and rolled up by state."""
    classified = classify_entries(join_nationwide(dataset), inputs)
    buckets = group_by_state(classified)
    states = summarize_states(buckets)
    all_entries = [c.entry for c in classified if c.entry.median_home_value is not None]

    logger.info(
        "nationwide_aggregated",
        extra={"context": {"zips": len(all_entries), "states": len(states)}},
    )
    return NationwideResult(
        states=states,
        all_entries=all_entries,
        stats=build_stats(all_entries, meta=dataset.meta),
        state_entries={
            code: b.entries for code, b in buckets.items()
            if code != UNKNOWN_STATE and b.total > 0
        },
    )


@dataclass
class StateDrillDown:
    state: str
    stats: HousingStats
    markers: list[ZipMarker]


def drill_down_state(
    all_entries: Sequence[HousingDataEntry],
    state_code: str,
    inputs: AffordabilityInputs,
    meta: Optional[DataMeta] = None,
) -> StateDrillDown:
    """
    Clicking a state: re-filter the nationwide entries and rebuild stats.
    No re-join against the raw tables.
    """
    code = state_code.upper()
    state_entries = [e for e in all_entries if e.state == code]
    return StateDrillDown(
        state=code,
        stats=build_stats(state_entries, meta=meta),
        markers=build_zip_markers(state_entries, inputs),
    )
