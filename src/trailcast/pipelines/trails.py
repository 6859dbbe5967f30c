"""Trail record loading and enrichment helpers.

Trail records come from the COTREX ETL as JSON: either a list of trail
objects or an object with a "trails" key. Each record carries identity,
centroid, and whatever enrichment succeeded (elevation, aspect, soil).
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import numpy as np
import requests

from trailcast.engine.drainage import dry_hours_for_label, normalize_drainage_class
from trailcast.engine.models import Aspect, DrainageClass, Trail
from trailcast.utils import COLORADO_BBOX, StaticPipeline, ValidationResult
from trailcast.utils.geo import initial_bearing
from trailcast.utils.io import get_data_path

logger = logging.getLogger(__name__)

# Request timeout in seconds
REQUEST_TIMEOUT = 120

# Sector start bearings, 45 degree sectors centred on each direction
_ASPECT_SECTORS = [
    (22.5, Aspect.NE),
    (67.5, Aspect.E),
    (112.5, Aspect.SE),
    (157.5, Aspect.S),
    (202.5, Aspect.SW),
    (247.5, Aspect.W),
    (292.5, Aspect.NW),
    (337.5, Aspect.N),
]


def bearing_to_aspect(bearing: float) -> Aspect:
    """Bucket a compass bearing into one of 8 directions.

    Args:
        bearing: Degrees, any range (0 = N, 90 = E)

    Returns:
        Aspect whose 45 degree sector contains the bearing
    """
    b = bearing % 360
    if b >= 337.5 or b < 22.5:
        return Aspect.N
    for start, aspect in reversed(_ASPECT_SECTORS):
        if b >= start:
            return aspect
    return Aspect.N


def _flatten_coords(geometry: dict[str, Any]) -> list[Sequence[float]]:
    coords = geometry.get("coordinates") or []
    if geometry.get("type") == "MultiLineString":
        return [pt for line in coords for pt in line]
    return list(coords)


def dominant_aspect(geometry: Optional[dict[str, Any]]) -> Optional[Aspect]:
    """Dominant direction of a LineString or MultiLineString.

    Circular mean of the segment bearings, so 350 and 10 average to 0
    rather than 180.

    Args:
        geometry: GeoJSON geometry with [lon, lat] coordinates

    Returns:
        Aspect, or None with fewer than two points
    """
    if not geometry:
        return None

    coords = _flatten_coords(geometry)
    if len(coords) < 2:
        return None

    bearings = np.radians([
        initial_bearing(a[0], a[1], b[0], b[1])
        for a, b in zip(coords[:-1], coords[1:])
    ])
    mean = np.degrees(np.arctan2(np.sin(bearings).sum(), np.cos(bearings).sum()))
    return bearing_to_aspect((mean + 360) % 360)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(round(float(value)))


def trail_from_record(record: dict[str, Any], default_id: int) -> Trail:
    """Build a Trail from one raw record.

    Unknown drainage or aspect strings become None. A missing aspect is
    derived from the geometry when one is present.

    Raises:
        ValueError: If the record has no source id, name or centroid.
    """
    cotrex_id = record.get("cotrex_id")
    name = record.get("name")
    lat = record.get("centroid_lat")
    lon = record.get("centroid_lon")
    if not cotrex_id or not name or lat is None or lon is None:
        raise ValueError(f"Trail record {default_id} missing cotrex_id, name or centroid")

    soil_label = record.get("soil_drainage_class")
    soil = normalize_drainage_class(soil_label)

    base_dry_hours = _optional_int(record.get("base_dry_hours"))
    if base_dry_hours is None and soil_label and DrainageClass.from_value(soil_label) is None:
        # Non-canonical SSURGO label; keep its own dry time
        base_dry_hours = dry_hours_for_label(soil_label)

    aspect = Aspect.from_value(record.get("dominant_aspect"))
    if aspect is None and record.get("geometry"):
        aspect = dominant_aspect(record["geometry"])

    return Trail(
        id=int(record.get("id") or default_id),
        cotrex_id=str(cotrex_id),
        name=str(name),
        centroid_lat=float(lat),
        centroid_lon=float(lon),
        elevation_min=_optional_int(record.get("elevation_min")),
        elevation_max=_optional_int(record.get("elevation_max")),
        dominant_aspect=aspect,
        soil_drainage_class=soil,
        base_dry_hours=base_dry_hours,
        access=record.get("access") or None,
        open_to_bikes=bool(record.get("open_to_bikes", True)),
    )


def parse_trail_records(data: Any) -> list[Trail]:
    """Parse decoded JSON (list, or object with 'trails') into Trails."""
    if isinstance(data, dict):
        data = data.get("trails", [])
    if not isinstance(data, list):
        raise ValueError("Trail data must be a list or an object with a 'trails' list")
    return [trail_from_record(record, i) for i, record in enumerate(data, 1)]


def load_trails(path: Path) -> list[Trail]:
    """Load trails from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    trails = parse_trail_records(data)
    logger.info(f"Loaded {len(trails)} trails from {path}")
    return trails


class TrailsPipeline(StaticPipeline):
    """Trail record pipeline.

    Example:
        >>> pipeline = TrailsPipeline("data/raw/trails/trails-enriched.json")
        >>> trails, validation = pipeline.run()
    """

    def __init__(self, source: Optional[str | Path] = None, raw_path: Optional[Path] = None):
        """Initialize the pipeline.

        Args:
            source: Local JSON file or http(s) URL
            raw_path: Directory for downloaded files. Defaults to data/raw/trails.
        """
        self.source = source
        self._raw_path = raw_path

    @property
    def raw_path(self) -> Path:
        if self._raw_path is None:
            self._raw_path = get_data_path("trails", "raw")
        return self._raw_path

    def download(self, source: Optional[str | Path] = None, **kwargs) -> Path:
        """Fetch trail JSON from a URL, or locate a local file.

        Raises:
            ValueError: If no source is configured.
            FileNotFoundError: If a local source does not exist.
            requests.HTTPError: If a download fails.
        """
        source = source or self.source
        if source is None:
            raise ValueError("No trail source configured")

        if str(source).startswith(("http://", "https://")):
            response = requests.get(str(source), timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            output_path = self.raw_path / "trails.json"
            with open(output_path, "w") as f:
                f.write(response.text)
            return output_path

        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Trail file not found: {path}")
        return path

    def process(self, raw_path: Path) -> list[Trail]:
        return load_trails(raw_path)

    def validate(self, data: Any) -> ValidationResult:
        """Check trails for duplicates, missing enrichment and stray centroids."""
        if not isinstance(data, list) or not data:
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["No trails"],
            )

        issues = []
        ids = [t.cotrex_id for t in data]
        duplicates = len(ids) - len(set(ids))
        if duplicates:
            issues.append(f"{duplicates} duplicate cotrex_id values")

        outside = sum(1 for t in data if not COLORADO_BBOX.contains(t.centroid_lat, t.centroid_lon))
        if outside:
            issues.append(f"{outside} trails with centroids outside Colorado")

        enrichment = [
            (t.elevation_min, t.dominant_aspect, t.soil_drainage_class) for t in data
        ]
        missing = sum(v is None for row in enrichment for v in row)
        missing_pct = missing / (len(enrichment) * 3) * 100

        return ValidationResult(
            valid=not issues,
            total_rows=len(data),
            missing_pct=missing_pct,
            outliers_count=outside,
            issues=issues,
            stats={"open_to_bikes": sum(1 for t in data if t.open_to_bikes)},
        )
