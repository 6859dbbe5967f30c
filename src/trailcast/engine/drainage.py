"""Soil drainage class to base dry time.

Base dry hours are the hours a trail needs to dry after saturating rain,
before aspect, elevation, and temperature adjustments.
"""

from typing import Optional, Union

from trailcast.engine.models import DrainageClass

# Hours to dry after saturating rain, by drainage class
BASE_DRY_HOURS = {
    DrainageClass.EXCESSIVELY_DRAINED: 6,
    DrainageClass.WELL_DRAINED: 24,
    DrainageClass.MODERATELY_WELL_DRAINED: 48,
    DrainageClass.SOMEWHAT_POORLY_DRAINED: 72,
    DrainageClass.POORLY_DRAINED: 120,
    DrainageClass.VERY_POORLY_DRAINED: 168,
}

DEFAULT_DRY_HOURS = 48

# SSURGO reports this class but it has no slot in the 6-class model
SOMEWHAT_EXCESSIVELY_DRAINED = "Somewhat excessively drained"
SOMEWHAT_EXCESSIVELY_DRY_HOURS = 12


def base_dry_hours(drainage_class: Optional[Union[DrainageClass, str]]) -> int:
    """Get base dry hours for a drainage class.

    Args:
        drainage_class: DrainageClass, its label, or None

    Returns:
        Base dry hours; 48 for unknown or missing classes
    """
    dc = DrainageClass.from_value(drainage_class)
    if dc is None:
        return DEFAULT_DRY_HOURS
    return BASE_DRY_HOURS[dc]


def resolve_base_dry_hours(
    precomputed: Optional[int],
    drainage_class: Optional[DrainageClass],
) -> int:
    """Precomputed hours win when present (including 0), else the soil table."""
    if precomputed is not None:
        return precomputed
    return base_dry_hours(drainage_class)


def normalize_drainage_class(label: Optional[str]) -> Optional[DrainageClass]:
    """Map a SSURGO drainage string onto a DrainageClass.

    SSURGO sometimes returns slightly different strings than the canonical
    labels, so exact matches are tried first and substring rules after.

    Args:
        label: Raw drainage class string

    Returns:
        Matching DrainageClass, or None if nothing fits
    """
    if not label:
        return None

    exact = DrainageClass.from_value(label.strip())
    if exact is not None:
        return exact

    lower = label.lower()
    if "excessively" in lower:
        return DrainageClass.EXCESSIVELY_DRAINED
    if "very poorly" in lower:
        return DrainageClass.VERY_POORLY_DRAINED
    if "somewhat poorly" in lower:
        return DrainageClass.SOMEWHAT_POORLY_DRAINED
    if "poorly" in lower:
        return DrainageClass.POORLY_DRAINED
    if "moderately well" in lower:
        return DrainageClass.MODERATELY_WELL_DRAINED
    if "well" in lower:
        return DrainageClass.WELL_DRAINED
    return None


def dry_hours_for_label(label: Optional[str]) -> int:
    """Base dry hours for a raw SSURGO label, as stored at ingestion time."""
    if label and label.strip().lower() == SOMEWHAT_EXCESSIVELY_DRAINED.lower():
        return SOMEWHAT_EXCESSIVELY_DRY_HOURS
    return base_dry_hours(normalize_drainage_class(label))
