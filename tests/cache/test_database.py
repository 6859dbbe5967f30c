"""Tests for the DuckDB store."""

import json
import tempfile
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

import pytest

from trailcast.cache.database import CacheDatabase
from trailcast.engine.batch import run_batch
from trailcast.engine.models import ConditionReport, TrailCondition
from trailcast.engine.regions import REGIONS_DATA

pytestmark = pytest.mark.integration


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.duckdb"
        db = CacheDatabase(db_path)
        yield db
        db.close()


class TestCacheDatabase:
    """Tests for CacheDatabase."""

    def test_init_creates_tables(self, temp_db):
        """Database initialization creates all required tables."""
        tables = temp_db.conn.execute(
            "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
        ).fetchall()
        table_names = {t[0] for t in tables}

        assert {
            "regions",
            "trails",
            "weather_cache",
            "trail_predictions",
            "condition_reports",
            "fetch_log",
        } <= table_names

    def test_regions_initialized(self, temp_db):
        """Regions table is populated on init in table order."""
        regions = temp_db.get_regions()
        assert len(regions) == len(REGIONS_DATA)
        assert regions[0].id == "front_range"
        assert regions[0].elevation_m == pytest.approx(1800)

    def test_reopen_does_not_duplicate_regions(self, temp_db):
        """Opening an existing file keeps one copy of each region."""
        temp_db.close()
        reopened = CacheDatabase(temp_db.db_path)
        assert len(reopened.get_regions()) == len(REGIONS_DATA)
        reopened.close()


class TestTrails:
    """Tests for trail storage."""

    def test_store_and_get(self, temp_db, sample_trails):
        """Stored trails round-trip."""
        assert temp_db.store_trails(sample_trails) == 4

        trails = temp_db.get_trails()
        assert [t.id for t in trails] == [1, 2, 3, 4]
        assert trails[0] == sample_trails[0]

    def test_upsert(self, temp_db, sample_trails):
        """Storing again updates in place."""
        temp_db.store_trails(sample_trails)
        temp_db.store_trails([replace(sample_trails[0], name="Mesa Trail South")])

        assert len(temp_db.get_trails()) == 4
        assert temp_db.get_trail("CTX-1").name == "Mesa Trail South"

    def test_lookup(self, temp_db, sample_trails):
        """Trails can be found by source id or internal id."""
        temp_db.store_trails(sample_trails)
        assert temp_db.get_trail("CTX-3").name == "Hermosa Creek"
        assert temp_db.get_trail_by_id(2).cotrex_id == "CTX-2"
        assert temp_db.get_trail("missing") is None
        assert temp_db.get_trail_by_id(99) is None


class TestWeather:
    """Tests for weather caching."""

    def test_window(self, temp_db, wet_weather, now):
        """The trailing window is returned newest first."""
        temp_db.store_weather("boulder", wet_weather)

        window = temp_db.get_weather_window("boulder", now.date(), days=7)

        assert window == wet_weather
        assert window[0].date == now.date()

    def test_window_bounds(self, temp_db, weather_window, now):
        """Days outside the window are excluded."""
        temp_db.store_weather("boulder", weather_window(now.date(), [1.0] * 10))
        assert len(temp_db.get_weather_window("boulder", now.date(), days=7)) == 7

    def test_upsert(self, temp_db, weather_window, now):
        """Re-storing a day replaces it."""
        temp_db.store_weather("boulder", weather_window(now.date(), [0.0]))
        temp_db.store_weather("boulder", weather_window(now.date(), [9.5]))

        window = temp_db.get_weather_window("boulder", now.date())
        assert len(window) == 1
        assert window[0].precipitation_mm == pytest.approx(9.5)

    def test_by_region(self, temp_db, wet_weather, dry_weather, now):
        """Weather is grouped by region."""
        temp_db.store_weather("boulder", wet_weather)
        temp_db.store_weather("front_range", dry_weather)

        weather = temp_db.get_weather_by_region(now.date())

        assert set(weather) == {"boulder", "front_range"}
        assert weather["front_range"] == dry_weather

    def test_cleanup(self, temp_db, weather_window, now):
        """Old weather is removed."""
        temp_db.store_weather("boulder", weather_window(now.date(), [0.0] * 40))

        deleted = temp_db.cleanup_old_weather(keep_days=30, today=now.date())

        assert deleted == 9
        assert temp_db.get_stats()["weather_count"] == 31


class TestPredictions:
    """Tests for prediction storage."""

    def test_store_and_get(self, temp_db, sample_trails, wet_weather, now):
        """Predictions round-trip including factors."""
        result = run_batch(sample_trails, {"front_range": wet_weather}, now=now)
        temp_db.store_predictions(result.predictions, predicted_at=now)

        stored = temp_db.get_predictions()

        assert stored == result.predictions
        assert temp_db.get_latest_prediction_time() == now

    def test_factors_stored_as_json(self, temp_db, sample_trails, wet_weather, now):
        """Factors are kept as JSON text."""
        result = run_batch(sample_trails[:1], {"front_range": wet_weather}, now=now)
        temp_db.store_predictions(result.predictions, predicted_at=now)

        raw = temp_db.conn.execute("SELECT factors FROM trail_predictions").fetchone()[0]
        assert json.loads(raw)["soil"] == "Well drained"

    def test_upsert_one_row_per_trail(self, temp_db, sample_trails, wet_weather, dry_weather, now):
        """A new run replaces the previous prediction."""
        first = run_batch(sample_trails, {"front_range": wet_weather}, now=now)
        temp_db.store_predictions(first.predictions, predicted_at=now)
        later = now.replace(hour=18)
        second = run_batch(sample_trails, {"front_range": dry_weather}, now=later)
        temp_db.store_predictions(second.predictions, predicted_at=later)

        assert len(temp_db.get_predictions()) == 4
        assert temp_db.get_prediction("CTX-2").condition == TrailCondition.RIDEABLE
        assert temp_db.get_latest_prediction_time() == later

    def test_get_missing(self, temp_db):
        """Unknown trails have no prediction."""
        assert temp_db.get_prediction("missing") is None
        assert temp_db.get_latest_prediction_time() is None


class TestReports:
    """Tests for condition reports."""

    def test_store_and_get(self, temp_db):
        """Reports are stored with an id."""
        report_id = temp_db.store_report(
            ConditionReport(trail_id=1, condition="tacky", notes="Hero dirt")
        )

        reports = temp_db.get_reports(trail_id=1)

        assert len(reports) == 1
        assert reports[0].id == report_id
        assert reports[0].notes == "Hero dirt"
        assert reports[0].reported_at is not None

    def test_newest_first(self, temp_db):
        """Reports come back newest first."""
        temp_db.store_report(ConditionReport(1, "muddy", reported_at=datetime(2024, 7, 1)))
        temp_db.store_report(ConditionReport(1, "dry", reported_at=datetime(2024, 7, 5)))

        assert [r.condition for r in temp_db.get_reports()] == ["dry", "muddy"]

    def test_invalid_condition(self, temp_db):
        """Only dry, tacky, muddy and snow are accepted."""
        with pytest.raises(ValueError, match="Invalid condition"):
            temp_db.store_report(ConditionReport(trail_id=1, condition="closed"))


class TestStats:
    """Tests for get_stats and fetch logging."""

    def test_empty_stats(self, temp_db):
        """A fresh store reports zeros."""
        stats = temp_db.get_stats()
        assert stats["trail_count"] == 0
        assert stats["prediction_count"] == 0
        assert stats["latest_weather_date"] is None

    def test_counts(self, temp_db, sample_trails, wet_weather, now):
        """Counts reflect stored rows."""
        temp_db.store_trails(sample_trails)
        temp_db.store_weather("boulder", wet_weather)

        stats = temp_db.get_stats()

        assert stats["trail_count"] == 4
        assert stats["weather_count"] == 7
        assert stats["latest_weather_date"] == date(2024, 7, 10)

    def test_log_fetch(self, temp_db):
        """Fetches are logged."""
        temp_db.log_fetch("open_meteo:boulder", "error", 0, 120, "timeout")
        row = temp_db.conn.execute("SELECT source, status, error_message FROM fetch_log").fetchone()
        assert row == ("open_meteo:boulder", "error", "timeout")
