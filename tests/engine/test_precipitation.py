"""Tests for precipitation history."""

from datetime import datetime, timezone

import pytest

from trailcast.engine.precipitation import (
    hours_since_significant_rain,
    recent_precipitation_total,
)


class TestHoursSinceSignificantRain:
    """Tests for hours_since_significant_rain."""

    def test_rain_yesterday(self, now, weather_window):
        """Rain yesterday counts from noon: 9am today is 21 hours later."""
        weather = weather_window(now.date(), [0.0, 12.0, 0.0])
        assert hours_since_significant_rain(weather, now) == 21

    def test_rain_later_today_clamps_to_zero(self, now, weather_window):
        """Today's rain is assumed at noon, still in the future at 9am."""
        weather = weather_window(now.date(), [5.0, 0.0])
        assert hours_since_significant_rain(weather, now) == 0

    def test_most_recent_rain_wins(self, now, weather_window):
        """The newest qualifying day is used."""
        weather = weather_window(now.date(), [0.0, 0.0, 3.0, 20.0])
        assert hours_since_significant_rain(weather, now) == 45

    def test_threshold_inclusive(self, now, weather_window):
        """Exactly 2.5mm qualifies."""
        weather = weather_window(now.date(), [0.0, 2.5])
        assert hours_since_significant_rain(weather, now) == 21

    def test_below_threshold_ignored(self, now, weather_window):
        """Drizzle under 2.5mm does not reset the clock."""
        weather = weather_window(now.date(), [0.0, 2.4, 0.0, 0.0])
        assert hours_since_significant_rain(weather, now) == 4 * 24

    def test_no_rain_uses_window_length(self, now, dry_weather):
        """No qualifying day gives window length in hours."""
        assert hours_since_significant_rain(dry_weather, now) == 168

    def test_empty_window(self, now):
        """Empty weather gives zero."""
        assert hours_since_significant_rain([], now) == 0

    def test_order_independent(self, now, weather_window):
        """Oldest-first input gives the same answer."""
        weather = weather_window(now.date(), [0.0, 0.0, 3.0, 20.0])
        assert hours_since_significant_rain(list(reversed(weather)), now) == 45

    def test_half_hour_rounds_up(self, now, weather_window):
        """21.5 hours rounds to 22."""
        weather = weather_window(now.date(), [0.0, 12.0])
        assert hours_since_significant_rain(weather, now.replace(minute=30)) == 22

    def test_timezone_aware_now(self, now, weather_window):
        """Aware times compare against noon in the same zone."""
        aware = now.replace(tzinfo=timezone.utc)
        weather = weather_window(now.date(), [0.0, 12.0])
        assert hours_since_significant_rain(weather, aware) == 21


class TestRecentPrecipitationTotal:
    """Tests for recent_precipitation_total."""

    def test_sums_last_seven_days(self, now, weather_window):
        """The eighth day back is excluded."""
        weather = weather_window(now.date(), [1.0] * 7 + [50.0])
        assert recent_precipitation_total(weather) == pytest.approx(7.0)

    def test_negative_values_clamped(self, now, weather_window):
        """Negative readings count as zero."""
        weather = weather_window(now.date(), [2.0, -1.0, 3.0])
        assert recent_precipitation_total(weather) == pytest.approx(5.0)

    def test_rounded_to_hundredths(self, now, weather_window):
        """Totals are rounded to two decimals."""
        weather = weather_window(now.date(), [0.1, 0.2, 0.004])
        assert recent_precipitation_total(weather) == 0.3

    def test_empty(self):
        """No weather totals zero."""
        assert recent_precipitation_total([]) == 0.0
