"""Seasonal and permanent trail closures.

The COTREX access field is free text. Recognised forms, checked in order:
- empty or missing: open
- "no" / "authorized/permitted user only": permanently closed
- a date range "M/D-M/D" (e.g. "5/1-11/30"): open only inside the range
- "seasonally": closed Nov-Apr on high trails (a guess, lower confidence)
Anything else is treated as open.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from trailcast.utils.geo import meters_to_feet

logger = logging.getLogger(__name__)

PERMANENT_CLOSURE_VALUES = {"no", "authorized/permitted user only"}
SEASONAL_KEYWORD = "seasonally"

DATE_RANGE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})\s*-\s*(\d{1,2})/(\d{1,2})")

WINTER_MONTHS = frozenset({11, 12, 1, 2, 3, 4})
SEASONAL_CLOSURE_MIN_ELEVATION_FT = 9500

PERMANENT_CONFIDENCE = 100
DATE_RANGE_CONFIDENCE = 100
SEASONAL_HEURISTIC_CONFIDENCE = 80


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of evaluating a trail's access field.

    Attributes:
        closed: Whether the trail is closed today
        reason: Why it is closed, None when open
        confidence: Confidence in the closure (0-100), 0 when open
    """

    closed: bool
    reason: Optional[str] = None
    confidence: int = 0


OPEN = AccessDecision(closed=False)


def is_winter_month(month: int) -> bool:
    """True for November through April."""
    return month in WINTER_MONTHS


def _in_season(today: date, open_date: date, close_date: date) -> bool:
    if open_date <= close_date:
        return open_date <= today <= close_date
    # Range wraps through year end, e.g. 11/1-3/31
    return today >= open_date or today <= close_date


def _evaluate_date_range(match: re.Match, today: date) -> Optional[AccessDecision]:
    open_month, open_day, close_month, close_day = (int(g) for g in match.groups())
    try:
        open_date = date(today.year, open_month, open_day)
        close_date = date(today.year, close_month, close_day)
    except ValueError:
        logger.warning(f"Ignoring impossible access date range: {match.group(0)!r}")
        return None

    if _in_season(today, open_date, close_date):
        return OPEN
    return AccessDecision(
        closed=True,
        reason="Seasonal closure",
        confidence=DATE_RANGE_CONFIDENCE,
    )


def evaluate_access(
    access: Optional[str],
    elevation_min_m: Optional[float],
    today: date,
) -> AccessDecision:
    """Decide whether a trail is closed regardless of weather.

    Args:
        access: Free-text access field
        elevation_min_m: Trail minimum elevation in meters
        today: Current calendar date

    Returns:
        AccessDecision
    """
    if not access or not access.strip():
        return OPEN

    text = access.strip().lower()

    if text in PERMANENT_CLOSURE_VALUES:
        return AccessDecision(
            closed=True,
            reason="Permanently closed",
            confidence=PERMANENT_CONFIDENCE,
        )

    match = DATE_RANGE_PATTERN.search(text)
    if match:
        return _evaluate_date_range(match, today) or OPEN

    if text == SEASONAL_KEYWORD:
        if (
            is_winter_month(today.month)
            and elevation_min_m is not None
            and meters_to_feet(elevation_min_m) > SEASONAL_CLOSURE_MIN_ELEVATION_FT
        ):
            return AccessDecision(
                closed=True,
                reason="Seasonal closure (estimated)",
                confidence=SEASONAL_HEURISTIC_CONFIDENCE,
            )
        return OPEN

    return OPEN


def is_closed(access: Optional[str], elevation_min_m: Optional[float], today: date) -> bool:
    """Shorthand for evaluate_access(...).closed."""
    return evaluate_access(access, elevation_min_m, today).closed
