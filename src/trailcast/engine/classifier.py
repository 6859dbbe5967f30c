"""Trail condition classifier.

Combines closures, soil drainage, environmental modifiers, and the
precipitation history into a condition label for one trail.

Decision order:
1. Closed (access field) short-circuits everything.
2. Snow/ice when cold or high in the winter months.
3. Unknown when the region has no weather at all.
4. Otherwise compare hours since rain against effective dry hours.

The classifier is a pure function of its inputs and the supplied `now`.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from trailcast.engine.access import evaluate_access, is_winter_month
from trailcast.engine.drainage import resolve_base_dry_hours
from trailcast.engine.modifiers import effective_dry_hours
from trailcast.engine.models import (
    Prediction,
    PredictionFactors,
    Region,
    Trail,
    TrailCondition,
    WeatherDay,
)
from trailcast.engine.precipitation import (
    hours_since_significant_rain,
    recent_precipitation_total,
)
from trailcast.engine.regions import default_region
from trailcast.engine.temperature import corrected_avg_temp
from trailcast.utils.geo import meters_to_feet

logger = logging.getLogger(__name__)

# Ratio of hours since rain to effective dry hours, checked top down
CONDITION_THRESHOLDS = (
    (1.5, TrailCondition.RIDEABLE),
    (1.0, TrailCondition.LIKELY_RIDEABLE),
    (0.5, TrailCondition.LIKELY_MUDDY),
)

# Snow/ice override
FREEZING_C = 0.0
SNOW_ALWAYS_ELEVATION_FT = 11000
SNOW_COLD_ELEVATION_FT = 9500
SNOW_COLD_TEMP_C = 5.0
SNOW_CONFIDENCE = 90

# Confidence scoring
BASE_CONFIDENCE = 50
SOIL_CONFIDENCE = 25
ASPECT_CONFIDENCE = 10
ELEVATION_CONFIDENCE = 10
MAX_CONFIDENCE = 100


def compute_confidence(trail: Trail) -> int:
    """Confidence from how much of the trail's data is known.

    Starts at 50 and only ever goes up, capped at 100.
    """
    confidence = BASE_CONFIDENCE
    if trail.soil_drainage_class is not None:
        confidence += SOIL_CONFIDENCE
    if trail.dominant_aspect is not None:
        confidence += ASPECT_CONFIDENCE
    if trail.elevation_min is not None:
        confidence += ELEVATION_CONFIDENCE
    return min(confidence, MAX_CONFIDENCE)


def is_snow_likely(
    avg_temp_c: float,
    elevation_min_m: Optional[float],
    month: int,
) -> bool:
    """Snow/ice override.

    True when the corrected temperature is below freezing, or in Nov-Apr
    when the trail is above 11000 ft, or above 9500 ft and below 5C.

    Args:
        avg_temp_c: Elevation-corrected average temperature
        elevation_min_m: Trail minimum elevation in meters
        month: Current month (1-12)
    """
    if avg_temp_c < FREEZING_C:
        return True

    if elevation_min_m is None or not is_winter_month(month):
        return False

    elevation_ft = meters_to_feet(elevation_min_m)
    if elevation_ft > SNOW_ALWAYS_ELEVATION_FT:
        return True
    return elevation_ft > SNOW_COLD_ELEVATION_FT and avg_temp_c < SNOW_COLD_TEMP_C


def condition_from_dry_time(hours_since_rain: int, dry_hours: int) -> TrailCondition:
    """Map elapsed hours against the effective dry time."""
    for ratio, condition in CONDITION_THRESHOLDS:
        if hours_since_rain > dry_hours * ratio:
            return condition
    return TrailCondition.MUDDY


def classify_trail(
    trail: Trail,
    weather: Sequence[WeatherDay],
    now: datetime,
    region: Optional[Region] = None,
) -> Prediction:
    """Predict the current condition of one trail.

    Args:
        trail: Static trail attributes
        weather: The trail's region weather window, any order
        now: Frozen run time
        region: Region supplying the weather; its station elevation is the
            lapse-rate baseline. Defaults to the fallback region.

    Returns:
        Prediction with a fully populated factors record
    """
    if region is None:
        region = default_region()

    base_hours = resolve_base_dry_hours(trail.base_dry_hours, trail.soil_drainage_class)
    recent_precip = recent_precipitation_total(weather)

    def build(
        condition: TrailCondition,
        confidence: int,
        hours_since_rain: int,
        dry_hours: int,
        avg_temp_c: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> Prediction:
        factors = PredictionFactors(
            soil=trail.soil_drainage_class,
            aspect=trail.dominant_aspect,
            elevation_min=trail.elevation_min,
            elevation_max=trail.elevation_max,
            recent_precip_mm=recent_precip,
            base_dry_hours=base_hours,
            avg_temp_c=round(avg_temp_c, 1) if avg_temp_c is not None else None,
            access=trail.access,
            reason=reason,
        )
        logger.debug(
            f"{trail.cotrex_id}: {condition.value} ({confidence}%), "
            f"{hours_since_rain}h since rain vs {dry_hours}h to dry"
        )
        return Prediction(
            trail_id=trail.id,
            cotrex_id=trail.cotrex_id,
            name=trail.name,
            centroid_lat=trail.centroid_lat,
            centroid_lon=trail.centroid_lon,
            condition=condition,
            confidence=confidence,
            hours_since_rain=hours_since_rain,
            effective_dry_hours=dry_hours,
            factors=factors,
            region=region.id,
            open_to_bikes=trail.open_to_bikes,
        )

    access = evaluate_access(trail.access, trail.elevation_min, now.date())
    if access.closed:
        return build(TrailCondition.CLOSED, access.confidence, 0, 0, reason=access.reason)

    avg_temp = corrected_avg_temp(weather, trail.elevation_min, region.elevation_m)
    dry_hours = effective_dry_hours(
        base_hours, trail.dominant_aspect, trail.elevation_min, avg_temp
    )
    hours_since_rain = hours_since_significant_rain(weather, now)

    if is_snow_likely(avg_temp, trail.elevation_min, now.month):
        return build(
            TrailCondition.SNOW,
            SNOW_CONFIDENCE,
            hours_since_rain,
            dry_hours,
            avg_temp,
            reason="Snow or ice likely",
        )

    confidence = compute_confidence(trail)

    if not weather:
        return build(
            TrailCondition.UNKNOWN,
            confidence,
            hours_since_rain,
            dry_hours,
            avg_temp,
            reason="No weather data",
        )

    condition = condition_from_dry_time(hours_since_rain, dry_hours)
    return build(condition, confidence, hours_since_rain, dry_hours, avg_temp)
