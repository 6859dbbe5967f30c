"""Weather regions and nearest-region lookup."""

from typing import Optional, Sequence

from trailcast.engine.models import Region
from trailcast.utils.geo import euclidean_distance

DEFAULT_REGION_ID = "front_range"

# Colorado weather regions - canonical list
REGIONS_DATA = [
    Region("front_range", "Front Range", 39.75, -105.2, 1800),
    Region("boulder", "Boulder", 40.015, -105.27, 1655),
    Region("golden", "Golden", 39.75, -105.22, 1730),
    Region("denver", "Denver", 39.74, -104.99, 1609),
    Region("colorado_springs", "Colorado Springs", 38.83, -104.82, 1839),
    Region("fort_collins", "Fort Collins", 40.58, -105.08, 1525),
    Region("summit_county", "Summit County", 39.6, -106.0, 2926),
    Region("leadville", "Leadville", 39.25, -106.29, 3094),
    Region("aspen", "Aspen", 39.19, -106.82, 2438),
    Region("durango", "Durango", 37.28, -107.88, 2003),
    Region("steamboat", "Steamboat Springs", 40.48, -106.83, 2051),
    Region("gunnison", "Gunnison", 38.55, -106.93, 2347),
    Region("telluride", "Telluride", 37.94, -107.81, 2667),
]

REGIONS_BY_ID = {r.id: r for r in REGIONS_DATA}


def default_region() -> Region:
    """The fallback region."""
    return REGIONS_BY_ID[DEFAULT_REGION_ID]


def get_region(region_id: str, regions: Optional[Sequence[Region]] = None) -> Optional[Region]:
    """Look up a region by id."""
    for region in regions if regions is not None else REGIONS_DATA:
        if region.id == region_id:
            return region
    return None


def nearest_region(
    lat: float,
    lon: float,
    regions: Optional[Sequence[Region]] = None,
) -> Region:
    """Find the closest region to a point.

    Distance is Euclidean over raw lat/lon. Ties go to the region listed
    first. Never fails: an empty region list gives the fallback region.

    Args:
        lat: Latitude
        lon: Longitude
        regions: Candidate regions. Defaults to REGIONS_DATA.

    Returns:
        Closest Region
    """
    if regions is None:
        regions = REGIONS_DATA

    nearest = None
    min_dist = float("inf")
    for region in regions:
        dist = euclidean_distance(lat, lon, region.lat, region.lon)
        if dist < min_dist:
            min_dist = dist
            nearest = region

    return nearest if nearest is not None else default_region()
