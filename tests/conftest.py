# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from zipreach.adapters.memory_source import InMemoryHousingDataSource
from zipreach.api.http import app, get_data_source
from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.housing import HousingDataEntry


def make_inputs(**overrides) -> AffordabilityInputs:
    """Baseline buyer profile; $75k income with the usual 28/36 DTI limits."""
    base = dict(
        annual_income=75_000,
        down_payment_pct=20,
        interest_rate=6.5,
        loan_term_years=30,
        property_tax_rate=1.1,
        annual_insurance=1500,
        monthly_debts=0,
        hoa_monthly=0,
        front_dti_pct=28,
        back_dti_pct=36,
        monthly_spending=0,
        include_spending=False,
        manual_max_price=None,
        use_manual_max_price=False,
    )
    base.update(overrides)
    return AffordabilityInputs(**base)


def make_entry(zip_code="10001", value=None, rent=None, state=None, lat=40.75, lon=-74.0) -> HousingDataEntry:
    return HousingDataEntry(
        zip=zip_code,
        lat=lat,
        lon=lon,
        median_home_value=value,
        median_rent=rent,
        state=state,
    )


# Raw housing table, camelCase like the prepared JSON file.
# At $75k income: <= ~$272k affordable, <= ~$356k stretch, above that unaffordable.
HOUSING_TABLE = {
    "_meta": {"zhviDate": "2025-01-31", "zoriDate": "2024-12-31", "fetchedAt": "2025-02-10"},
    "10001": {"state": "NY", "name": "New York, NY", "medianHomeValue": 200000, "medianRent": 2000},
    "10002": {"state": "NY", "name": "New York, NY", "medianHomeValue": 300000, "medianRent": 2500},
    "10003": {"state": "NY", "name": "New York, NY", "medianHomeValue": 500000, "medianRent": 3000,
              "landSharePct": 42.5, "fmr": {"br0": 1800, "br1": 2100, "br2": 2600, "br3": None, "br4": None}},
    "10004": {"state": "NY", "name": "New York, NY", "medianHomeValue": None, "medianRent": 2800},
    "19104": {"state": "PA", "name": "Philadelphia, PA", "medianHomeValue": 150000, "medianRent": 1400},
    "19103": {"state": "PA", "name": "Philadelphia, PA", "medianHomeValue": 250000, "medianRent": 1900},
    "94110": {"state": "CA", "name": "San Francisco, CA", "medianHomeValue": 1200000, "medianRent": 3800},
    # no state on the record
    "00501": {"medianHomeValue": 100000, "medianRent": None},
    # record without a centroid
    "99999": {"state": "NY", "medianHomeValue": 100000, "medianRent": 1000},
}


def _pt(zip_code, lon, lat):
    return {
        "type": "Feature",
        "properties": {"ZCTA5CE20": zip_code},
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }


CENTROIDS = {
    "type": "FeatureCollection",
    "features": [
        _pt("10001", -74.00, 40.75),
        _pt("10002", -73.99, 40.72),
        _pt("10003", -73.98, 40.73),
        _pt("10004", -74.01, 40.70),
        # centroid with no housing record
        _pt("10005", -74.009, 40.706),
        _pt("19104", -75.20, 39.96),
        _pt("19103", -75.17, 39.95),
        _pt("94110", -122.41, 37.75),
        _pt("00501", -73.04, 40.81),
    ],
}

# Lower Manhattan box
ISOCHRONE = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {},
            "geometry": {
                "type": "Polygon",
                "coordinates": [[
                    [-74.10, 40.60], [-73.90, 40.60], [-73.90, 40.80], [-74.10, 40.80], [-74.10, 40.60],
                ]],
            },
        }
    ],
}


@pytest.fixture
def inputs():
    return make_inputs()


@pytest.fixture
def source():
    return InMemoryHousingDataSource(HOUSING_TABLE, CENTROIDS)


@pytest.fixture
def dataset(source):
    return source.load()


@pytest.fixture
def isochrone():
    return ISOCHRONE


@pytest.fixture
def client(source):
    app.dependency_overrides[get_data_source] = lambda: source
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
