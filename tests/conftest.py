"""Shared pytest fixtures for trailcast tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- integration: Tests against a real temporary DuckDB file
- live: Real API tests, slow, requires network

Run live tests with: pytest -m live --run-live
"""

from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from trailcast.engine.models import Aspect, DrainageClass, Trail, WeatherDay


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live API tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "integration: tests against a temporary database")
    config.addinivalue_line("markers", "live: real API tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        # --run-live given: don't skip live tests
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


def make_weather(
    end: date,
    precip: list[float],
    temp_max: float = 15.0,
    temp_min: float = 2.0,
) -> list[WeatherDay]:
    """Weather window ending at `end`, newest first.

    precip[0] is `end`, precip[1] the day before, and so on.
    """
    return [
        WeatherDay(
            date=end - timedelta(days=i),
            precipitation_mm=p,
            temp_max_c=temp_max,
            temp_min_c=temp_min,
        )
        for i, p in enumerate(precip)
    ]


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def weather_window():
    """Factory for weather windows, see make_weather."""
    return make_weather


@pytest.fixture
def now() -> datetime:
    """Frozen run time: a July morning."""
    return datetime(2024, 7, 10, 9, 0)


@pytest.fixture
def dry_weather(now) -> list[WeatherDay]:
    """Seven dry, warm days ending today."""
    return make_weather(now.date(), [0.0] * 7, temp_max=25.0, temp_min=12.0)


@pytest.fixture
def wet_weather(now) -> list[WeatherDay]:
    """Heavy rain yesterday, otherwise dry, moderate temperatures."""
    return make_weather(now.date(), [0.0, 12.0, 0.0, 0.0, 0.0, 0.0, 0.0], temp_max=15.0)


@pytest.fixture
def sample_trail() -> Trail:
    """Well drained, south-facing Front Range trail."""
    return Trail(
        id=1,
        cotrex_id="CTX-1",
        name="Mesa Trail",
        centroid_lat=39.95,
        centroid_lon=-105.28,
        elevation_min=1700,
        elevation_max=1900,
        dominant_aspect=Aspect.S,
        soil_drainage_class=DrainageClass.WELL_DRAINED,
    )


@pytest.fixture
def sample_trails() -> list[Trail]:
    """A handful of trails spread across regions."""
    return [
        Trail(
            id=1,
            cotrex_id="CTX-1",
            name="Mesa Trail",
            centroid_lat=39.95,
            centroid_lon=-105.28,
            elevation_min=1700,
            elevation_max=1900,
            dominant_aspect=Aspect.S,
            soil_drainage_class=DrainageClass.WELL_DRAINED,
        ),
        Trail(
            id=2,
            cotrex_id="CTX-2",
            name="Apex Trail",
            centroid_lat=39.72,
            centroid_lon=-105.24,
            elevation_min=1800,
            elevation_max=2200,
            dominant_aspect=Aspect.N,
            soil_drainage_class=DrainageClass.POORLY_DRAINED,
        ),
        Trail(
            id=3,
            cotrex_id="CTX-3",
            name="Hermosa Creek",
            centroid_lat=37.45,
            centroid_lon=-107.85,
            elevation_min=2500,
            elevation_max=2900,
            dominant_aspect=Aspect.E,
            soil_drainage_class=DrainageClass.MODERATELY_WELL_DRAINED,
        ),
        Trail(
            id=4,
            cotrex_id="CTX-4",
            name="Wilderness Loop",
            centroid_lat=39.6,
            centroid_lon=-105.9,
            elevation_min=3000,
            access="no",
            open_to_bikes=False,
        ),
    ]


@pytest.fixture
def trail_records() -> list[dict]:
    """Raw trail records as produced by the trail ETL."""
    return [
        {
            "id": 1,
            "cotrex_id": "CTX-1",
            "name": "Mesa Trail",
            "centroid_lat": 39.95,
            "centroid_lon": -105.28,
            "elevation_min": 1700,
            "elevation_max": 1900,
            "dominant_aspect": "S",
            "soil_drainage_class": "Well drained",
            "open_to_bikes": True,
        },
        {
            "id": 2,
            "cotrex_id": "CTX-2",
            "name": "Apex Trail",
            "centroid_lat": 39.72,
            "centroid_lon": -105.24,
            "soil_drainage_class": "Somewhat excessively drained",
            "geometry": {
                "type": "LineString",
                "coordinates": [[-105.24, 39.72], [-105.24, 39.73], [-105.24, 39.74]],
            },
        },
        {
            "id": 3,
            "cotrex_id": "CTX-3",
            "name": "Wilderness Loop",
            "centroid_lat": 39.6,
            "centroid_lon": -105.9,
            "access": "no",
            "open_to_bikes": False,
        },
    ]
