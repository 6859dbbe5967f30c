"""Tests for temperature averaging and lapse-rate correction."""

from datetime import date, timedelta

import pytest

from trailcast.engine.models import WeatherDay
from trailcast.engine.temperature import (
    DEFAULT_AVG_TEMP_C,
    apply_lapse_rate,
    corrected_avg_temp,
    station_avg_temp,
)


def _days(temps_newest_first):
    end = date(2024, 7, 10)
    return [
        WeatherDay(date=end - timedelta(days=i), precipitation_mm=0.0, temp_max_c=t, temp_min_c=t - 10)
        for i, t in enumerate(temps_newest_first)
    ]


class TestStationAvgTemp:
    """Tests for station_avg_temp."""

    def test_mean_of_three_most_recent(self):
        """Only the three newest days count."""
        assert station_avg_temp(_days([10.0, 20.0, 30.0, 100.0])) == pytest.approx(20.0)

    def test_order_independent(self):
        """Input order does not matter."""
        days = list(reversed(_days([10.0, 20.0, 30.0, 100.0])))
        assert station_avg_temp(days) == pytest.approx(20.0)

    def test_short_window(self):
        """Fewer than three days averages what is there."""
        assert station_avg_temp(_days([12.0, 18.0])) == pytest.approx(15.0)

    def test_empty_window_default(self):
        """No weather gives the 15C default."""
        assert station_avg_temp([]) == DEFAULT_AVG_TEMP_C == 15.0


class TestApplyLapseRate:
    """Tests for apply_lapse_rate."""

    def test_cools_with_gain(self):
        """1000m above the station is 6.5C cooler."""
        assert apply_lapse_rate(20.0, 2800, 1800) == pytest.approx(13.5)

    def test_no_warming_below_station(self):
        """Trails below the station keep the station temperature."""
        assert apply_lapse_rate(20.0, 1500, 1800) == pytest.approx(20.0)

    def test_unknown_trail_elevation(self):
        """Unknown elevation means no correction."""
        assert apply_lapse_rate(20.0, None, 1800) == pytest.approx(20.0)


class TestCorrectedAvgTemp:
    """Tests for corrected_avg_temp."""

    def test_combines_average_and_lapse(self):
        """Average of 10, 20, 30 at 2000m above the station."""
        result = corrected_avg_temp(_days([10.0, 20.0, 30.0]), 3800, 1800)
        assert result == pytest.approx(20.0 - 13.0)

    def test_default_when_empty(self):
        """Empty weather corrects the 15C default."""
        assert corrected_avg_temp([], 2800, 1800) == pytest.approx(8.5)
