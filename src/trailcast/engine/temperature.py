"""Station temperature averaging and elevation correction.

Weather stations usually sit well below the trails they serve, so the
station reading is cooled along the standard lapse rate before it feeds
the temperature modifier and snow checks.
"""

from typing import Optional, Sequence

from trailcast.engine.models import WeatherDay

# Standard atmospheric lapse rate: temperature decreases ~6.5C per 1000m
LAPSE_RATE_C_PER_KM = 6.5

DEFAULT_AVG_TEMP_C = 15.0
AVG_TEMP_DAYS = 3


def station_avg_temp(weather: Sequence[WeatherDay], days: int = AVG_TEMP_DAYS) -> float:
    """Mean daily max temperature over the most recent days.

    Args:
        weather: Weather days in any order
        days: Number of most recent days to average

    Returns:
        Average in Celsius; 15C when there is no weather at all
    """
    recent = sorted(weather, key=lambda d: d.date, reverse=True)[:days]
    if not recent:
        return DEFAULT_AVG_TEMP_C
    return sum(d.temp_max_c for d in recent) / len(recent)


def apply_lapse_rate(
    station_temp_c: float,
    trail_elev_m: Optional[float],
    station_elev_m: float,
) -> float:
    """Cool a station temperature to trail elevation.

    Only elevation gain counts; trails below the station are not warmed.
    Unknown trail elevation means no correction.

    Args:
        station_temp_c: Station temperature in Celsius
        trail_elev_m: Trail elevation in meters, or None
        station_elev_m: Station elevation in meters

    Returns:
        Corrected temperature in Celsius
    """
    if trail_elev_m is None:
        trail_elev_m = station_elev_m
    gain_km = max(0.0, trail_elev_m - station_elev_m) / 1000.0
    return station_temp_c - gain_km * LAPSE_RATE_C_PER_KM


def corrected_avg_temp(
    weather: Sequence[WeatherDay],
    trail_elev_m: Optional[float],
    station_elev_m: float,
) -> float:
    """Recent average station temperature corrected to trail elevation."""
    return apply_lapse_rate(station_avg_temp(weather), trail_elev_m, station_elev_m)
