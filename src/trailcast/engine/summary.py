"""Filtering and summary statistics over predictions."""

from typing import Iterable, Sequence, Union

from trailcast.engine.models import Prediction, TrailCondition
from trailcast.utils.geo import MAP_BOUNDS, BoundingBox


def calculate_stats(predictions: Sequence[Prediction]) -> dict[str, int]:
    """Total plus a count for every condition label.

    Returns:
        Dict with 'total' and one key per TrailCondition value
    """
    stats = {"total": len(predictions)}
    stats.update({condition.value: 0 for condition in TrailCondition})
    for p in predictions:
        stats[p.condition.value] += 1
    return stats


def filter_by_condition(
    predictions: Iterable[Prediction],
    conditions: Iterable[Union[TrailCondition, str]],
) -> list[Prediction]:
    """Keep predictions whose condition is in the given set."""
    wanted = {TrailCondition(c) for c in conditions}
    return [p for p in predictions if p.condition in wanted]


def filter_by_bounds(predictions: Iterable[Prediction], bbox: BoundingBox) -> list[Prediction]:
    """Keep predictions whose centroid falls inside the bounding box."""
    return [p for p in predictions if bbox.contains(p.centroid_lat, p.centroid_lon)]


def filter_by_region(predictions: Iterable[Prediction], region_name: str) -> list[Prediction]:
    """Filter to a named map area; unknown names leave the list unfiltered."""
    bbox = MAP_BOUNDS.get(region_name)
    if bbox is None:
        return list(predictions)
    return filter_by_bounds(predictions, bbox)


def filter_by_search(predictions: Iterable[Prediction], query: str) -> list[Prediction]:
    """Case-insensitive name search; every word of the query must appear."""
    words = query.strip().lower().split()
    if not words:
        return list(predictions)
    return [
        p for p in predictions
        if all(word in (p.name or "").lower() for word in words)
    ]
