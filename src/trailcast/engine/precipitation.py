"""Precipitation history over a trailing weather window."""

from datetime import datetime, time
from typing import Sequence

from trailcast.engine.modifiers import round_half_away_from_zero
from trailcast.engine.models import WeatherDay

# Daily precipitation at or above this starts the drying clock
PRECIP_THRESHOLD_MM = 2.5

# Rain is assumed to fall at local noon
RAIN_HOUR = 12

RECENT_PRECIP_DAYS = 7


def _newest_first(weather: Sequence[WeatherDay]) -> list[WeatherDay]:
    return sorted(weather, key=lambda d: d.date, reverse=True)


def hours_since_significant_rain(weather: Sequence[WeatherDay], now: datetime) -> int:
    """Hours since the most recent day with significant precipitation.

    Args:
        weather: Weather days in any order
        now: Frozen run time; naive or aware, noon is built in the same zone

    Returns:
        Whole hours since noon of the latest day at or above 2.5mm, never
        negative. If no day qualifies, window length * 24 (0 when empty).
    """
    for day in _newest_first(weather):
        if day.precipitation_mm >= PRECIP_THRESHOLD_MM:
            rain_time = datetime.combine(day.date, time(RAIN_HOUR), tzinfo=now.tzinfo)
            hours = (now - rain_time).total_seconds() / 3600
            return max(0, round_half_away_from_zero(hours))

    return len(weather) * 24


def recent_precipitation_total(
    weather: Sequence[WeatherDay],
    days: int = RECENT_PRECIP_DAYS,
) -> float:
    """Total precipitation over the most recent days.

    Negative readings are clamped to zero.
    """
    recent = _newest_first(weather)[:days]
    total = sum(max(0.0, d.precipitation_mm) for d in recent)
    return round(total, 2)
