import pytest

from zipreach.domain.housing import ZipCentroid, ZipRecord
from zipreach.domain.ports import HousingDataset
from zipreach.services.housing_join import (
    affordable_for_isochrone,
    housing_for_isochrone,
    join_isochrone,
    join_nationwide,
    make_entry,
)
from conftest import make_inputs


def test_make_entry_copies_record_fields():
    centroid = ZipCentroid(zip="10003", lat=40.73, lon=-73.98)
    record = ZipRecord.model_validate(
        {"state": "ny", "name": "New York, NY", "medianHomeValue": 500000, "medianRent": 3000, "landSharePct": 42.5}
    )
    entry = make_entry(centroid, record)
    assert (entry.zip, entry.lat, entry.lon) == ("10003", 40.73, -73.98)
    assert entry.state == "NY"
    assert entry.median_home_value == 500000
    assert entry.land_share_pct == 42.5


def test_make_entry_without_record_has_null_housing():
    entry = make_entry(ZipCentroid(zip="501", lat=40.8, lon=-73.0), None)
    assert entry.zip == "00501"
    assert entry.median_home_value is None
    assert entry.median_rent is None
    assert entry.state is None


def test_join_isochrone_keeps_centroids_inside_the_ring(dataset, isochrone):
    entries = join_isochrone(dataset, isochrone)
    assert [e.zip for e in entries] == ["10001", "10002", "10003", "10004", "10005"]


def test_join_isochrone_includes_zips_without_records(dataset, isochrone):
    by_zip = {e.zip: e for e in join_isochrone(dataset, isochrone)}
    assert by_zip["10005"].median_home_value is None
    assert by_zip["10004"].median_home_value is None
    assert by_zip["10004"].median_rent == 2800


def test_join_isochrone_accepts_bare_polygon(dataset, isochrone):
    polygon = isochrone["features"][0]["geometry"]
    assert len(join_isochrone(dataset, polygon)) == 5


def test_join_isochrone_empty_feature_collection(dataset):
    assert join_isochrone(dataset, {"type": "FeatureCollection", "features": []}) == []


def test_join_isochrone_on_empty_dataset(isochrone):
    assert join_isochrone(HousingDataset(), isochrone) == []


def test_housing_for_isochrone_stats(dataset, isochrone):
    stats = housing_for_isochrone(dataset, isochrone)
    assert stats.zip_count == 5
    assert stats.coverage == 3
    assert stats.median_home_value == 300000
    assert stats.min_home_value == 200000
    assert stats.max_home_value == 500000
    assert stats.median_rent == pytest.approx(2650)
    assert stats.meta.zhvi_date == "2025-01-31"


def test_affordable_for_isochrone_markers(dataset, isochrone, inputs):
    result = affordable_for_isochrone(dataset, isochrone, inputs)
    assert len(result.stats.entries) == 5
    assert [(m.zip, m.tier) for m in result.markers] == [
        ("10001", "affordable"),
        ("10002", "stretch"),
        ("10003", "unaffordable"),
    ]


def test_affordable_for_isochrone_without_income(dataset, isochrone):
    result = affordable_for_isochrone(dataset, isochrone, make_inputs(annual_income=None))
    assert result.stats.zip_count == 5
    assert result.markers == []


def test_join_nationwide_drops_records_without_centroid(dataset):
    zips = {e.zip for e in join_nationwide(dataset)}
    assert "99999" not in zips
    assert "10005" not in zips
    assert zips == {"10001", "10002", "10003", "10004", "19104", "19103", "94110", "00501"}
