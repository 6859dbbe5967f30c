"""Ingestion pipelines for trailcast.

- OpenMeteoPipeline: daily regional weather
- TrailsPipeline: enriched trail records
"""

from trailcast.pipelines.open_meteo import (
    OpenMeteoPipeline,
    frame_to_weather_days,
    parse_daily_response,
    weather_by_region,
)
from trailcast.pipelines.trails import (
    TrailsPipeline,
    bearing_to_aspect,
    dominant_aspect,
    load_trails,
    parse_trail_records,
)

__all__ = [
    "OpenMeteoPipeline",
    "TrailsPipeline",
    "bearing_to_aspect",
    "dominant_aspect",
    "frame_to_weather_days",
    "load_trails",
    "parse_daily_response",
    "parse_trail_records",
    "weather_by_region",
]
