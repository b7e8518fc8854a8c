import math

import pytest

from zipreach.domain.housing import DataMeta
from zipreach.domain.metrics import build_stats, median, round_half_up
from conftest import make_entry


@pytest.mark.parametrize(
    "x, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (12.5, 13), (-0.5, 0), (-1.5, -1)],
)
def test_round_half_up(x, expected):
    assert round_half_up(x) == expected


def test_median_odd_and_even():
    assert median([3, 1, 2]) == 2
    assert median([4, 1, 3, 2]) == 2.5


def test_median_empty_is_none():
    assert median([]) is None
    assert median([None, math.nan]) is None


def test_median_skips_missing_values():
    assert median([None, 10, math.nan, 30]) == 20


def test_median_does_not_reorder_input():
    values = [5, 1, 4, 2, 3]
    median(values)
    assert values == [5, 1, 4, 2, 3]


def test_build_stats_counts_every_entry():
    entries = [
        make_entry("1", value=100_000, rent=1000),
        make_entry("2", value=300_000, rent=None),
        make_entry("3", value=None, rent=2000),
        make_entry("4", value=200_000, rent=1500),
    ]
    stats = build_stats(entries)

    assert stats.zip_count == 4
    assert stats.median_home_value == 200_000
    assert stats.min_home_value == 100_000
    assert stats.max_home_value == 300_000
    assert stats.median_rent == 1500
    assert stats.min_rent == 1000
    assert stats.max_rent == 2000
    assert stats.entries == entries


def test_build_stats_empty():
    stats = build_stats([])
    assert stats.zip_count == 0
    assert stats.median_home_value is None
    assert stats.min_home_value is None
    assert stats.max_rent is None
    assert stats.median_land_share_pct is None


def test_build_stats_carries_meta():
    meta = DataMeta(zhvi_date="2025-01-31")
    stats = build_stats([make_entry(value=1)], meta=meta)
    assert stats.meta is meta


def test_build_stats_supplementary_medians():
    entries = [make_entry("1", value=1), make_entry("2", value=2)]
    entries[0].land_share_pct = 30.0
    entries[1].land_share_pct = 50.0
    entries[0].appreciation_5yr = 20.0
    stats = build_stats(entries)
    assert stats.median_land_share_pct == 40.0
    assert stats.median_appreciation_5yr == 20.0
    assert stats.median_land_value_per_acre is None


def test_median_single_value():
    assert median([5]) == 5


def test_build_stats_skips_null_home_values():
    entries = [make_entry("1", value=100_000), make_entry("2", value=None), make_entry("3", value=300_000)]
    stats = build_stats(entries)
    assert stats.zip_count == 3
    assert stats.median_home_value == 200_000
    assert (stats.min_home_value, stats.max_home_value) == (100_000, 300_000)
