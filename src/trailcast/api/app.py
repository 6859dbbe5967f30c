"""FastAPI application for trail condition predictions.

Provides REST API endpoints for:
- Stored predictions with filtering and pagination
- Condition summaries and weather regions
- User condition reports
- Health checks

Example:
    >>> from trailcast.api import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn trailcast.api.app:app --reload
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trailcast.api.schemas import (
    ErrorResponse,
    HealthResponse,
    Pagination,
    PredictionsDocument,
    RegionSchema,
    ReportRequest,
    ReportResponse,
    SummaryResponse,
    TrailPredictionSchema,
)
from trailcast.cache.database import DEFAULT_DB_PATH, CacheDatabase
from trailcast.engine.batch import empty_summary
from trailcast.engine.models import ConditionReport, Prediction
from trailcast.engine.summary import (
    filter_by_bounds,
    filter_by_condition,
    filter_by_region,
    filter_by_search,
)
from trailcast.utils.geo import BoundingBox

logger = logging.getLogger(__name__)

# API version
API_VERSION = "1.0.0"
COVERAGE_NAME = "Colorado"

DEFAULT_LIMIT = 1000
MAX_LIMIT = 5000


class PredictionStore:
    """Lazy handle on the prediction database.

    The database is opened on first use so the app can be created
    before the daily job has ever run.

    Attributes:
        db_path: Path to the DuckDB file
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._db: Optional[CacheDatabase] = None

    @property
    def db(self) -> CacheDatabase:
        if self._db is None:
            self._db = CacheDatabase(self.db_path)
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None


# Global prediction store
_store: Optional[PredictionStore] = None


def get_store() -> PredictionStore:
    """Get or create global prediction store."""
    global _store
    if _store is None:
        _store = PredictionStore()
    return _store


def _summarize(predictions: list[Prediction]) -> dict[str, int]:
    summary = empty_summary()
    for p in predictions:
        summary[p.condition.value] += 1
    return summary


def create_app(db_path: Optional[Path] = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        db_path: Optional DuckDB path. Uses the shared default store if not given.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Trail Conditions API",
        description="Rideability predictions for Colorado mountain bike trails",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = PredictionStore(db_path) if db_path else get_store()
    app.state.store = store

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with custom response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            ).model_dump(),
        )

    @app.get("/", tags=["info"])
    def root():
        """Root endpoint with API info."""
        return {
            "name": "Trail Conditions API",
            "version": API_VERSION,
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse, tags=["info"])
    def health_check():
        """Health check endpoint."""
        latest = store.db.get_latest_prediction_time()
        return HealthResponse(
            status="healthy",
            predictions_available=latest is not None,
            latest_prediction=latest,
            version=API_VERSION,
        )

    @app.get(
        "/predictions",
        response_model=PredictionsDocument,
        tags=["predictions"],
    )
    def list_predictions(
        conditions: Optional[str] = Query(None, description="Comma-separated condition labels"),
        region: Optional[str] = Query(None, description="Named map area"),
        min_lat: Optional[float] = None,
        max_lat: Optional[float] = None,
        min_lon: Optional[float] = None,
        max_lon: Optional[float] = None,
        q: Optional[str] = Query(None, description="Trail name search"),
        bike_only: bool = False,
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
        offset: int = Query(0, ge=0),
    ):
        """List stored predictions.

        Filters apply in order: condition, region, bounds, search, bikes.
        The summary counts the filtered set before pagination.
        """
        predictions = store.db.get_predictions()

        if conditions:
            labels = [c.strip() for c in conditions.split(",") if c.strip()]
            try:
                predictions = filter_by_condition(predictions, labels)
            except ValueError:
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid condition in '{conditions}'",
                )

        if region:
            predictions = filter_by_region(predictions, region)

        bounds = (min_lat, max_lat, min_lon, max_lon)
        if all(v is not None for v in bounds):
            predictions = filter_by_bounds(
                predictions,
                BoundingBox(west=min_lon, south=min_lat, east=max_lon, north=max_lat),
            )

        if q:
            predictions = filter_by_search(predictions, q)

        if bike_only:
            predictions = [p for p in predictions if p.open_to_bikes]

        page = predictions[offset:offset + limit]

        return PredictionsDocument(
            generated_at=store.db.get_latest_prediction_time(),
            region=COVERAGE_NAME,
            total_trails=len(predictions),
            summary=_summarize(predictions),
            trails=[TrailPredictionSchema.from_prediction(p) for p in page],
            pagination=Pagination(offset=offset, limit=limit, returned=len(page)),
        )

    @app.get("/predictions/summary", response_model=SummaryResponse, tags=["predictions"])
    def predictions_summary():
        """Condition counts across all stored predictions."""
        predictions = store.db.get_predictions()
        return SummaryResponse(
            generated_at=store.db.get_latest_prediction_time(),
            total_trails=len(predictions),
            summary=_summarize(predictions),
        )

    @app.get(
        "/predictions/{cotrex_id}",
        response_model=TrailPredictionSchema,
        responses={404: {"model": ErrorResponse, "description": "Trail not found"}},
        tags=["predictions"],
    )
    def get_prediction(cotrex_id: str):
        """Prediction for a single trail."""
        prediction = store.db.get_prediction(cotrex_id)
        if prediction is None:
            raise HTTPException(
                status_code=404,
                detail=f"No prediction for trail {cotrex_id}",
            )
        return TrailPredictionSchema.from_prediction(prediction)

    @app.get("/regions", response_model=list[RegionSchema], tags=["info"])
    def list_regions():
        """Weather regions."""
        return [RegionSchema.from_region(r) for r in store.db.get_regions()]

    @app.post(
        "/reports",
        response_model=ReportResponse,
        status_code=201,
        responses={
            404: {"model": ErrorResponse, "description": "Trail not found"},
            422: {"description": "Invalid report"},
        },
        tags=["reports"],
    )
    def submit_report(request: ReportRequest):
        """Record a user-observed trail condition."""
        if store.db.get_trail_by_id(request.trail_id) is None:
            raise HTTPException(
                status_code=404,
                detail=f"Trail {request.trail_id} not found",
            )

        reported_at = datetime.utcnow()
        report_id = store.db.store_report(
            ConditionReport(
                trail_id=request.trail_id,
                condition=request.condition,
                notes=request.notes,
                reported_at=reported_at,
            )
        )
        logger.info(f"Report {report_id}: trail {request.trail_id} {request.condition}")

        return ReportResponse(
            id=report_id,
            trail_id=request.trail_id,
            condition=request.condition,
            reported_at=reported_at,
        )

    return app


# Default app instance for uvicorn
app = create_app()
