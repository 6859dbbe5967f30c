"""Pydantic schemas for API request/response validation.

Also used for the exported predictions document written by the daily job.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from trailcast.engine.models import Prediction, Region

ConditionLabel = Literal[
    "rideable",
    "likely_rideable",
    "likely_muddy",
    "muddy",
    "snow",
    "closed",
    "unknown",
]

ReportCondition = Literal["dry", "tacky", "muddy", "snow"]


class FactorsSchema(BaseModel):
    """Inputs that contributed to a prediction."""

    soil: Optional[str] = None
    aspect: Optional[str] = None
    elevation_min: Optional[int] = None
    elevation_max: Optional[int] = None
    recent_precip_mm: float = 0.0
    base_dry_hours: int = 0
    avg_temp_c: Optional[float] = None
    access: Optional[str] = None
    reason: Optional[str] = None


class TrailPredictionSchema(BaseModel):
    """Prediction for one trail.

    Attributes:
        id: Internal trail id
        cotrex_id: Source system id
        condition: Rideability label
        confidence: 0-100
        hours_since_rain: Hours since the last significant rain
        effective_dry_hours: Adjusted dry time for this trail
        region: Weather region the prediction used
    """

    id: int
    cotrex_id: str
    name: str
    centroid_lat: float
    centroid_lon: float
    open_to_bikes: bool = True
    condition: ConditionLabel
    confidence: int = Field(..., ge=0, le=100)
    hours_since_rain: int = Field(..., ge=0)
    effective_dry_hours: int = Field(..., ge=0)
    region: Optional[str] = None
    factors: FactorsSchema

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> "TrailPredictionSchema":
        return cls.model_validate(prediction.to_dict())


class Pagination(BaseModel):
    """Page window of a predictions listing."""

    offset: int
    limit: int
    returned: int


class PredictionsDocument(BaseModel):
    """Predictions for every trail, as exported by the daily job.

    Attributes:
        generated_at: When the batch ran
        region: Coverage area name
        total_trails: Number of trails in the (filtered) set
        summary: Count per condition label
        trails: One prediction per trail
        pagination: Present on paged API responses only
    """

    generated_at: Optional[datetime] = None
    region: str = "Colorado"
    total_trails: int
    summary: dict[str, int]
    trails: list[TrailPredictionSchema]
    pagination: Optional[Pagination] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "generated_at": "2026-05-10T06:00:00",
                    "region": "Colorado",
                    "total_trails": 1,
                    "summary": {
                        "rideable": 1,
                        "likely_rideable": 0,
                        "likely_muddy": 0,
                        "muddy": 0,
                        "snow": 0,
                        "closed": 0,
                        "unknown": 0,
                    },
                    "trails": [],
                }
            ]
        }
    }


class SummaryResponse(BaseModel):
    """Condition counts without the trail list."""

    generated_at: Optional[datetime] = None
    total_trails: int
    summary: dict[str, int]


class RegionSchema(BaseModel):
    """Weather region."""

    id: str
    name: str
    lat: float
    lon: float
    elevation_m: float

    @classmethod
    def from_region(cls, region: Region) -> "RegionSchema":
        return cls(
            id=region.id,
            name=region.name,
            lat=region.lat,
            lon=region.lon,
            elevation_m=region.elevation_m,
        )


class ReportRequest(BaseModel):
    """User condition report.

    Attributes:
        trail_id: Internal trail id
        condition: What the rider saw
        notes: Optional free text
    """

    trail_id: int = Field(..., ge=1, description="Internal trail id")
    condition: ReportCondition = Field(..., description="Observed condition")
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Optional notes",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"trail_id": 42, "condition": "tacky", "notes": "Perfect after yesterday's rain"}
            ]
        }
    }


class ReportResponse(BaseModel):
    """Stored condition report."""

    success: bool = True
    id: int
    trail_id: int
    condition: ReportCondition
    reported_at: datetime


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Service status
        predictions_available: Whether any predictions are stored
        latest_prediction: Timestamp of the most recent batch
        version: API version
    """

    status: str = Field(
        default="healthy",
        description="Service status",
    )
    predictions_available: bool = Field(
        default=False,
        description="Whether predictions are stored",
    )
    latest_prediction: Optional[datetime] = Field(
        default=None,
        description="Timestamp of the latest batch",
    )
    version: str = Field(
        default="1.0.0",
        description="API version",
    )


class ErrorResponse(BaseModel):
    """Error response schema.

    Attributes:
        error: Error type/code
        message: Human-readable error message
        detail: Additional error details
    """

    error: str = Field(
        ...,
        description="Error type",
    )
    message: str = Field(
        ...,
        description="Error message",
    )
    detail: Optional[str] = Field(
        default=None,
        description="Additional details",
    )
