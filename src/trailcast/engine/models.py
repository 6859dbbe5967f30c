"""Data models for the trail condition engine.

Trail and WeatherDay come from the ingestion layer and are treated as
read-only values. Prediction is produced fresh on every run.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


class DrainageClass(str, Enum):
    """USDA soil survey drainage classes (SSURGO)."""

    EXCESSIVELY_DRAINED = "Excessively drained"
    WELL_DRAINED = "Well drained"
    MODERATELY_WELL_DRAINED = "Moderately well drained"
    SOMEWHAT_POORLY_DRAINED = "Somewhat poorly drained"
    POORLY_DRAINED = "Poorly drained"
    VERY_POORLY_DRAINED = "Very poorly drained"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["DrainageClass"]:
        """Exact lookup by label, None for anything unrecognised."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Aspect(str, Enum):
    """Compass direction a slope predominantly faces."""

    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["Aspect"]:
        """Case-insensitive lookup, None for anything unrecognised."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


class TrailCondition(str, Enum):
    """Predicted rideability label."""

    RIDEABLE = "rideable"
    LIKELY_RIDEABLE = "likely_rideable"
    LIKELY_MUDDY = "likely_muddy"
    MUDDY = "muddy"
    SNOW = "snow"
    CLOSED = "closed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Trail:
    """Static trail attributes.

    Attributes:
        id: Stable internal identifier
        cotrex_id: Identifier in the source system (COTREX)
        name: Display name
        centroid_lat: Centroid latitude, used for region lookup only
        centroid_lon: Centroid longitude
        elevation_min: Lowest point in meters, None if enrichment failed
        elevation_max: Highest point in meters
        dominant_aspect: Dominant slope aspect
        soil_drainage_class: Soil drainage class
        base_dry_hours: Precomputed dry time; authoritative when present
        access: Free-text closure descriptor ("no", "5/1-11/30", "seasonally")
        open_to_bikes: Whether bikes are allowed
    """

    id: int
    cotrex_id: str
    name: str
    centroid_lat: float
    centroid_lon: float
    elevation_min: Optional[int] = None
    elevation_max: Optional[int] = None
    dominant_aspect: Optional[Aspect] = None
    soil_drainage_class: Optional[DrainageClass] = None
    base_dry_hours: Optional[int] = None
    access: Optional[str] = None
    open_to_bikes: bool = True

    def __post_init__(self):
        # Raw labels become enum members; unrecognised ones become None
        object.__setattr__(self, "dominant_aspect", Aspect.from_value(self.dominant_aspect))
        object.__setattr__(
            self, "soil_drainage_class", DrainageClass.from_value(self.soil_drainage_class)
        )


@dataclass(frozen=True)
class WeatherDay:
    """One day of weather for one region."""

    date: date
    precipitation_mm: float
    temp_max_c: float
    temp_min_c: float
    humidity_pct: int = 50


@dataclass(frozen=True)
class Region:
    """Weather region with a representative station.

    Attributes:
        id: Region key, e.g. 'front_range'
        name: Display name
        lat: Center latitude
        lon: Center longitude
        elevation_m: Station elevation in meters
    """

    id: str
    name: str
    lat: float
    lon: float
    elevation_m: float


@dataclass(frozen=True)
class PredictionFactors:
    """Every input that contributed to a prediction."""

    soil: Optional[DrainageClass]
    aspect: Optional[Aspect]
    elevation_min: Optional[int]
    elevation_max: Optional[int]
    recent_precip_mm: float
    base_dry_hours: int
    avg_temp_c: Optional[float] = None
    access: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["soil"] = self.soil.value if self.soil else None
        d["aspect"] = self.aspect.value if self.aspect else None
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PredictionFactors":
        """Create PredictionFactors from a stored dictionary."""
        return cls(
            soil=DrainageClass.from_value(d.get("soil")),
            aspect=Aspect.from_value(d.get("aspect")),
            elevation_min=d.get("elevation_min"),
            elevation_max=d.get("elevation_max"),
            recent_precip_mm=d.get("recent_precip_mm", 0.0),
            base_dry_hours=d.get("base_dry_hours", 0),
            avg_temp_c=d.get("avg_temp_c"),
            access=d.get("access"),
            reason=d.get("reason"),
        )


@dataclass(frozen=True)
class Prediction:
    """Condition prediction for a single trail."""

    trail_id: int
    cotrex_id: str
    name: str
    centroid_lat: float
    centroid_lon: float
    condition: TrailCondition
    confidence: int
    hours_since_rain: int
    effective_dry_hours: int
    factors: PredictionFactors
    region: Optional[str] = None
    open_to_bikes: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with enum values flattened to strings."""
        return {
            "id": self.trail_id,
            "cotrex_id": self.cotrex_id,
            "name": self.name,
            "centroid_lat": self.centroid_lat,
            "centroid_lon": self.centroid_lon,
            "open_to_bikes": self.open_to_bikes,
            "condition": self.condition.value,
            "confidence": self.confidence,
            "hours_since_rain": self.hours_since_rain,
            "effective_dry_hours": self.effective_dry_hours,
            "region": self.region,
            "factors": self.factors.to_dict(),
        }


@dataclass
class ConditionReport:
    """User-submitted trail condition."""

    trail_id: int
    condition: str
    notes: Optional[str] = None
    reported_at: Optional[datetime] = None
    user_id: Optional[str] = None
    id: Optional[int] = None


REPORT_CONDITIONS = ("dry", "tacky", "muddy", "snow")

