"""Read API for trailcast predictions.

This module provides:

- create_app: Factory function to create FastAPI application
- PredictionsDocument: Predictions listing with summary counts
- ReportRequest: User condition report body
- PredictionStore: Lazy handle on the prediction database

Note: FastAPI-dependent exports (create_app, PredictionStore) are lazy-loaded
to allow importing schemas without FastAPI installed.
"""

# Schemas can be imported directly (only depend on pydantic)
from trailcast.api.schemas import (
    ErrorResponse,
    FactorsSchema,
    HealthResponse,
    Pagination,
    PredictionsDocument,
    RegionSchema,
    ReportRequest,
    ReportResponse,
    SummaryResponse,
    TrailPredictionSchema,
)


# Lazy imports for FastAPI-dependent components
def __getattr__(name):
    """Lazy load FastAPI-dependent components."""
    if name in ("create_app", "get_store", "PredictionStore"):
        from trailcast.api.app import PredictionStore, create_app, get_store
        if name == "create_app":
            return create_app
        elif name == "get_store":
            return get_store
        elif name == "PredictionStore":
            return PredictionStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_app",
    "get_store",
    "PredictionStore",
    "ErrorResponse",
    "FactorsSchema",
    "HealthResponse",
    "Pagination",
    "PredictionsDocument",
    "RegionSchema",
    "ReportRequest",
    "ReportResponse",
    "SummaryResponse",
    "TrailPredictionSchema",
]
