"""Trail condition prediction engine.

Pure, deterministic scoring: trail attributes + regional weather history +
the current time in, condition label with confidence and factors out.

Example:
    >>> from trailcast.engine import run_batch
    >>> result = run_batch(trails, weather_by_region, now=datetime(2024, 7, 4, 9))
    >>> result.summary["rideable"]
"""

from trailcast.engine.access import AccessDecision, evaluate_access, is_closed
from trailcast.engine.batch import BatchResult, run_batch, select_bike_trails
from trailcast.engine.classifier import classify_trail, compute_confidence, is_snow_likely
from trailcast.engine.drainage import base_dry_hours, normalize_drainage_class
from trailcast.engine.modifiers import (
    aspect_modifier,
    effective_dry_hours,
    elevation_modifier,
    temperature_modifier,
)
from trailcast.engine.models import (
    Aspect,
    DrainageClass,
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
from trailcast.engine.regions import REGIONS_DATA, nearest_region
from trailcast.engine.summary import calculate_stats
from trailcast.engine.temperature import apply_lapse_rate, corrected_avg_temp

__all__ = [
    "AccessDecision",
    "Aspect",
    "BatchResult",
    "DrainageClass",
    "Prediction",
    "PredictionFactors",
    "REGIONS_DATA",
    "Region",
    "Trail",
    "TrailCondition",
    "WeatherDay",
    "apply_lapse_rate",
    "aspect_modifier",
    "base_dry_hours",
    "calculate_stats",
    "classify_trail",
    "compute_confidence",
    "corrected_avg_temp",
    "effective_dry_hours",
    "elevation_modifier",
    "evaluate_access",
    "hours_since_significant_rain",
    "is_closed",
    "is_snow_likely",
    "nearest_region",
    "normalize_drainage_class",
    "recent_precipitation_total",
    "run_batch",
    "select_bike_trails",
    "temperature_modifier",
]
