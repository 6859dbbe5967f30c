"""Persistent store for trailcast.

Keeps trails, regional weather, predictions and condition reports in DuckDB.

The daily refresh can be run via:
    python -m trailcast.cache.refresh

Or scheduled via cron:
    # Every day at 06:00
    0 6 * * * python -m trailcast.cache.refresh
"""

from trailcast.cache.database import DEFAULT_DB_PATH, CacheDatabase
from trailcast.cache.refresh import (
    RefreshResult,
    build_predictions_document,
    generate_predictions,
    get_cache_status,
    load_trails_into_db,
    refresh_all,
    refresh_weather_for_regions,
    write_predictions_json,
)

__all__ = [
    "CacheDatabase",
    "DEFAULT_DB_PATH",
    "RefreshResult",
    "build_predictions_document",
    "generate_predictions",
    "get_cache_status",
    "load_trails_into_db",
    "refresh_all",
    "refresh_weather_for_regions",
    "write_predictions_json",
]
