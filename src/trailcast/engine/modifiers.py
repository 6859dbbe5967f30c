"""Environmental modifiers applied to base dry time.

Three independent multiplicative factors:
- aspect: south-facing slopes get more sun and dry faster
- elevation: trails above ~8000 ft dry slower
- temperature: warm air dries faster, freezing air barely at all

The aspect scale is empirical and must stay exactly as tabled.
"""

import math
from typing import Optional, Union

from trailcast.engine.models import Aspect

ASPECT_MODIFIERS = {
    Aspect.S: 0.6,
    Aspect.SE: 0.7,
    Aspect.SW: 0.7,
    Aspect.E: 0.85,
    Aspect.W: 0.85,
    Aspect.NE: 1.1,
    Aspect.NW: 1.1,
    Aspect.N: 1.3,
}

# ~8000 ft
HIGH_ELEVATION_THRESHOLD_M = 2438
HIGH_ELEVATION_MODIFIER = 1.2

# (exclusive lower bound in C, modifier), checked top down
TEMPERATURE_STEPS = (
    (20.0, 0.7),  # Hot
    (10.0, 1.0),  # Moderate
    (0.0, 1.5),   # Cold
)
FREEZING_MODIFIER = 3.0


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's round() uses banker's rounding, which would give 2 for 2.5.
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def aspect_modifier(aspect: Optional[Union[Aspect, str]]) -> float:
    """Drying modifier for slope aspect; 1.0 when unknown."""
    a = Aspect.from_value(aspect)
    if a is None:
        return 1.0
    return ASPECT_MODIFIERS.get(a, 1.0)


def elevation_modifier(elevation_min_m: Optional[float]) -> float:
    """Drying modifier for elevation; single threshold, no interpolation."""
    if elevation_min_m is not None and elevation_min_m > HIGH_ELEVATION_THRESHOLD_M:
        return HIGH_ELEVATION_MODIFIER
    return 1.0


def temperature_modifier(avg_temp_c: float) -> float:
    """Drying modifier for corrected average temperature.

    Step function with strict comparisons, so exactly 20, 10 and 0
    fall into the colder bucket.
    """
    for lower_bound, modifier in TEMPERATURE_STEPS:
        if avg_temp_c > lower_bound:
            return modifier
    return FREEZING_MODIFIER


def effective_dry_hours(
    base_hours: float,
    aspect: Optional[Union[Aspect, str]],
    elevation_min_m: Optional[float],
    avg_temp_c: float,
) -> int:
    """Base dry hours with all three modifiers applied.

    Only the final product is rounded.

    Args:
        base_hours: Base dry hours from soil drainage
        aspect: Dominant slope aspect
        elevation_min_m: Trail minimum elevation in meters
        avg_temp_c: Elevation-corrected average temperature

    Returns:
        Effective dry hours
    """
    product = (
        base_hours
        * aspect_modifier(aspect)
        * elevation_modifier(elevation_min_m)
        * temperature_modifier(avg_temp_c)
    )
    return round_half_away_from_zero(product)
