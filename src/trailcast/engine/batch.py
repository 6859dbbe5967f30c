"""Batch prediction across all trails in a region.

"now" is sampled once per run so every trail sees the same time.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence

from trailcast.engine.classifier import classify_trail
from trailcast.engine.models import Prediction, Region, Trail, TrailCondition, WeatherDay
from trailcast.engine.regions import (
    DEFAULT_REGION_ID,
    REGIONS_DATA,
    default_region,
    get_region,
    nearest_region,
)

logger = logging.getLogger(__name__)


def empty_summary() -> dict[str, int]:
    """Zero count for every condition label."""
    return {condition.value: 0 for condition in TrailCondition}


@dataclass
class BatchResult:
    """Result of a batch prediction run."""

    generated_at: datetime
    predictions: list[Prediction] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=empty_summary)
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.predictions)

    def __str__(self) -> str:
        counts = ", ".join(f"{k}={v}" for k, v in self.summary.items() if v)
        return f"Batch complete: {self.total} trails ({counts}) ({self.duration_ms}ms)"


def select_bike_trails(trails: Iterable[Trail]) -> list[Trail]:
    """Keep only trails open to bikes."""
    return [t for t in trails if t.open_to_bikes]


def weather_for_region(
    region: Region,
    weather_by_region: Mapping[str, Sequence[WeatherDay]],
    default_region_id: str = DEFAULT_REGION_ID,
    regions: Optional[Sequence[Region]] = None,
) -> tuple[Region, Sequence[WeatherDay]]:
    """A region's weather window, or the default region's when it has none.

    Returns the region the weather actually came from, since its station
    elevation is the baseline for temperature correction.
    """
    weather = weather_by_region.get(region.id)
    if weather:
        return region, weather
    fallback = get_region(default_region_id, regions) or default_region()
    return fallback, weather_by_region.get(fallback.id) or []


def run_batch(
    trails: Iterable[Trail],
    weather_by_region: Mapping[str, Sequence[WeatherDay]],
    regions: Optional[Sequence[Region]] = None,
    now: Optional[datetime] = None,
    default_region_id: str = DEFAULT_REGION_ID,
) -> BatchResult:
    """Classify every trail against its nearest region's weather.

    Args:
        trails: Trails to classify; any bike filtering is the caller's job
        weather_by_region: Weather days keyed by region id
        regions: Region table. Defaults to REGIONS_DATA.
        now: Run time. Sampled once here when not given.
        default_region_id: Region whose weather backs regions without data

    Returns:
        BatchResult with one prediction per trail and per-label counts
    """
    if regions is None:
        regions = REGIONS_DATA
    if now is None:
        now = datetime.now()

    start_time = time.time()
    result = BatchResult(generated_at=now)

    for trail in trails:
        region = nearest_region(trail.centroid_lat, trail.centroid_lon, regions)
        source, weather = weather_for_region(
            region, weather_by_region, default_region_id, regions
        )
        prediction = classify_trail(trail, weather, now, source)

        result.predictions.append(prediction)
        result.summary[prediction.condition.value] += 1

    result.duration_ms = int((time.time() - start_time) * 1000)
    logger.info(str(result))
    return result
