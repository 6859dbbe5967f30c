"""Geographic utilities and constants."""

from dataclasses import dataclass
from math import atan2, cos, degrees, radians, sin, sqrt

FEET_PER_METER = 3.28084


@dataclass
class BoundingBox:
    """Geographic bounding box."""

    west: float
    south: float
    east: float
    north: float

    def contains(self, lat: float, lon: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.south <= lat <= self.north
            and self.west <= lon <= self.east
        )


def euclidean_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Straight-line distance in raw lat/lon degrees.

    Good enough for picking the closest of a handful of nearby regions;
    not a ground distance.
    """
    return sqrt((lat1 - lat2) ** 2 + (lon1 - lon2) ** 2)


def initial_bearing(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2.

    Args:
        lon1, lat1: Start point (degrees, GeoJSON order)
        lon2, lat2: End point (degrees)

    Returns:
        Bearing in degrees, -180 to 180 (0 = north, 90 = east)
    """
    phi1, phi2 = radians(lat1), radians(lat2)
    dlon = radians(lon2 - lon1)
    y = sin(dlon) * cos(phi2)
    x = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(dlon)
    return degrees(atan2(y, x))


def meters_to_feet(meters: float) -> float:
    """Convert meters to feet."""
    return meters * FEET_PER_METER


# Colorado state bounding box
COLORADO_BBOX = BoundingBox(
    west=-109.06,
    south=36.99,
    east=-102.04,
    north=41.0,
)

# Named map areas for filtering predictions
MAP_BOUNDS = {
    "front_range": BoundingBox(west=-105.7, south=39.3, east=-104.5, north=40.5),
    "boulder": BoundingBox(west=-105.5, south=39.9, east=-105.1, north=40.15),
    "golden": BoundingBox(west=-105.35, south=39.65, east=-105.1, north=39.85),
    "denver": BoundingBox(west=-105.15, south=39.6, east=-104.8, north=39.85),
}
