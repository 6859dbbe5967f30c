"""DuckDB store for trails, weather, and predictions."""

import json
import logging
import time
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional, Sequence

import duckdb

from trailcast.engine.models import (
    REPORT_CONDITIONS,
    Aspect,
    ConditionReport,
    DrainageClass,
    Prediction,
    PredictionFactors,
    Region,
    Trail,
    TrailCondition,
    WeatherDay,
)
from trailcast.engine.regions import REGIONS_DATA

logger = logging.getLogger(__name__)

# Default database path - use project root to ensure consistent path
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
DEFAULT_DB_PATH = _PROJECT_ROOT / "data" / "cache" / "trailcast.duckdb"

_CONDITIONS_SQL = ", ".join(f"'{c.value}'" for c in TrailCondition)
_REPORT_CONDITIONS_SQL = ", ".join(f"'{c}'" for c in REPORT_CONDITIONS)

# SQL schema - DuckDB uses sequences for auto-increment
SCHEMA_SQL = f"""
CREATE SEQUENCE IF NOT EXISTS seq_weather_id START 1;
CREATE SEQUENCE IF NOT EXISTS seq_prediction_id START 1;
CREATE SEQUENCE IF NOT EXISTS seq_report_id START 1;
CREATE SEQUENCE IF NOT EXISTS seq_fetch_log_id START 1;

-- Weather regions (reference data)
CREATE TABLE IF NOT EXISTS regions (
    id VARCHAR PRIMARY KEY,
    name VARCHAR NOT NULL,
    lat DOUBLE NOT NULL,
    lon DOUBLE NOT NULL,
    elevation_m DOUBLE NOT NULL
);

-- Enriched trail attributes
CREATE TABLE IF NOT EXISTS trails (
    cotrex_id VARCHAR PRIMARY KEY,
    id INTEGER NOT NULL,
    name VARCHAR NOT NULL,
    centroid_lat DOUBLE NOT NULL,
    centroid_lon DOUBLE NOT NULL,
    elevation_min INTEGER,
    elevation_max INTEGER,
    dominant_aspect VARCHAR,
    soil_drainage_class VARCHAR,
    base_dry_hours INTEGER,
    access VARCHAR,
    open_to_bikes BOOLEAN DEFAULT true,
    updated_at TIMESTAMP NOT NULL
);

-- Daily weather by region
CREATE TABLE IF NOT EXISTS weather_cache (
    id INTEGER DEFAULT nextval('seq_weather_id') PRIMARY KEY,
    region VARCHAR NOT NULL,
    date DATE NOT NULL,
    precipitation_mm DOUBLE,
    temp_max_c DOUBLE,
    temp_min_c DOUBLE,
    humidity_pct INTEGER,
    fetched_at TIMESTAMP NOT NULL,
    UNIQUE(region, date)
);

-- Latest prediction per trail
CREATE TABLE IF NOT EXISTS trail_predictions (
    id INTEGER DEFAULT nextval('seq_prediction_id') PRIMARY KEY,
    cotrex_id VARCHAR NOT NULL UNIQUE,
    trail_id INTEGER NOT NULL,
    name VARCHAR NOT NULL,
    centroid_lat DOUBLE NOT NULL,
    centroid_lon DOUBLE NOT NULL,
    open_to_bikes BOOLEAN,
    region VARCHAR,
    condition VARCHAR NOT NULL CHECK (condition IN ({_CONDITIONS_SQL})),
    confidence INTEGER NOT NULL CHECK (confidence >= 0 AND confidence <= 100),
    hours_since_rain INTEGER,
    effective_dry_hours INTEGER,
    factors VARCHAR,
    predicted_at TIMESTAMP NOT NULL
);

-- User-submitted conditions
CREATE TABLE IF NOT EXISTS condition_reports (
    id INTEGER DEFAULT nextval('seq_report_id') PRIMARY KEY,
    trail_id INTEGER NOT NULL,
    condition VARCHAR NOT NULL CHECK (condition IN ({_REPORT_CONDITIONS_SQL})),
    notes VARCHAR,
    reported_at TIMESTAMP NOT NULL,
    user_id VARCHAR
);

-- Fetch log for debugging/monitoring
CREATE TABLE IF NOT EXISTS fetch_log (
    id INTEGER DEFAULT nextval('seq_fetch_log_id') PRIMARY KEY,
    source VARCHAR NOT NULL,
    timestamp TIMESTAMP NOT NULL,
    status VARCHAR NOT NULL,
    records_added INTEGER,
    duration_ms INTEGER,
    error_message VARCHAR
);
"""

_TRAIL_COLUMNS = """
    id, cotrex_id, name, centroid_lat, centroid_lon, elevation_min, elevation_max,
    dominant_aspect, soil_drainage_class, base_dry_hours, access, open_to_bikes
"""

_PREDICTION_COLUMNS = """
    trail_id, cotrex_id, name, centroid_lat, centroid_lon, condition, confidence,
    hours_since_rain, effective_dry_hours, factors, region, open_to_bikes
"""


def _row_to_trail(row: tuple) -> Trail:
    return Trail(
        id=row[0],
        cotrex_id=row[1],
        name=row[2],
        centroid_lat=row[3],
        centroid_lon=row[4],
        elevation_min=row[5],
        elevation_max=row[6],
        dominant_aspect=Aspect.from_value(row[7]),
        soil_drainage_class=DrainageClass.from_value(row[8]),
        base_dry_hours=row[9],
        access=row[10],
        open_to_bikes=bool(row[11]) if row[11] is not None else True,
    )


def _row_to_prediction(row: tuple) -> Prediction:
    factors = json.loads(row[9]) if row[9] else {}
    return Prediction(
        trail_id=row[0],
        cotrex_id=row[1],
        name=row[2],
        centroid_lat=row[3],
        centroid_lon=row[4],
        condition=TrailCondition(row[5]),
        confidence=row[6],
        hours_since_rain=row[7] or 0,
        effective_dry_hours=row[8] or 0,
        factors=PredictionFactors.from_dict(factors),
        region=row[10],
        open_to_bikes=bool(row[11]) if row[11] is not None else True,
    )


class CacheDatabase:
    """DuckDB database manager.

    Holds the trail catalogue, the regional weather cache, the latest
    prediction per trail, and user condition reports.

    Example:
        >>> db = CacheDatabase()
        >>> db.get_weather_window("boulder", date.today())
        [WeatherDay(...), ...]
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize database connection.

        Args:
            db_path: Path to DuckDB file. Creates if doesn't exist.
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = None
        self._init_schema()

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get database connection (lazy initialization with retry)."""
        if self._conn is None:
            self._conn = self._connect_with_retry()
        return self._conn

    def _connect_with_retry(self, max_retries: int = 3) -> duckdb.DuckDBPyConnection:
        """Connect to database with retry logic for lock handling."""
        last_error = None
        for attempt in range(max_retries):
            try:
                return duckdb.connect(str(self.db_path))
            except duckdb.IOException as e:
                last_error = e
                if "lock" in str(e).lower() and attempt < max_retries - 1:
                    wait_time = 0.5 * (2 ** attempt)  # Exponential backoff
                    logger.warning(f"Database locked, retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    raise
        raise last_error

    def _init_schema(self) -> None:
        """Initialize database schema."""
        for statement in SCHEMA_SQL.split(";"):
            statement = statement.strip()
            if statement:
                self.conn.execute(statement)
        self._init_regions()
        logger.info(f"Database initialized at {self.db_path}")

    def _init_regions(self) -> None:
        """Populate regions table with reference data."""
        existing = self.conn.execute("SELECT COUNT(*) FROM regions").fetchone()[0]
        if existing > 0:
            return

        for region in REGIONS_DATA:
            self.conn.execute(
                """
                INSERT INTO regions (id, name, lat, lon, elevation_m)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (id) DO NOTHING
                """,
                [region.id, region.name, region.lat, region.lon, region.elevation_m],
            )
        logger.info(f"Initialized {len(REGIONS_DATA)} regions")

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -------------------------------------------------------------------------
    # Region Operations
    # -------------------------------------------------------------------------

    def get_regions(self) -> list[Region]:
        """Get all regions in insertion order."""
        rows = self.conn.execute(
            "SELECT id, name, lat, lon, elevation_m FROM regions ORDER BY rowid"
        ).fetchall()
        return [Region(*row) for row in rows]

    # -------------------------------------------------------------------------
    # Trail Operations
    # -------------------------------------------------------------------------

    def store_trails(self, trails: Iterable[Trail]) -> int:
        """Insert or update trails keyed by cotrex_id.

        Returns:
            Number of trails written
        """
        now = datetime.utcnow()
        count = 0
        for t in trails:
            self.conn.execute(
                """
                INSERT INTO trails
                (cotrex_id, id, name, centroid_lat, centroid_lon, elevation_min,
                 elevation_max, dominant_aspect, soil_drainage_class, base_dry_hours,
                 access, open_to_bikes, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (cotrex_id)
                DO UPDATE SET
                    id = EXCLUDED.id,
                    name = EXCLUDED.name,
                    centroid_lat = EXCLUDED.centroid_lat,
                    centroid_lon = EXCLUDED.centroid_lon,
                    elevation_min = EXCLUDED.elevation_min,
                    elevation_max = EXCLUDED.elevation_max,
                    dominant_aspect = EXCLUDED.dominant_aspect,
                    soil_drainage_class = EXCLUDED.soil_drainage_class,
                    base_dry_hours = EXCLUDED.base_dry_hours,
                    access = EXCLUDED.access,
                    open_to_bikes = EXCLUDED.open_to_bikes,
                    updated_at = EXCLUDED.updated_at
                """,
                [
                    t.cotrex_id,
                    t.id,
                    t.name,
                    t.centroid_lat,
                    t.centroid_lon,
                    t.elevation_min,
                    t.elevation_max,
                    t.dominant_aspect.value if t.dominant_aspect else None,
                    t.soil_drainage_class.value if t.soil_drainage_class else None,
                    t.base_dry_hours,
                    t.access,
                    t.open_to_bikes,
                    now,
                ],
            )
            count += 1
        logger.info(f"Stored {count} trails")
        return count

    def get_trails(self) -> list[Trail]:
        """Get all trails ordered by internal id."""
        rows = self.conn.execute(f"SELECT {_TRAIL_COLUMNS} FROM trails ORDER BY id").fetchall()
        return [_row_to_trail(row) for row in rows]

    def get_trail(self, cotrex_id: str) -> Optional[Trail]:
        """Get a trail by source id."""
        row = self.conn.execute(
            f"SELECT {_TRAIL_COLUMNS} FROM trails WHERE cotrex_id = ?",
            [cotrex_id],
        ).fetchone()
        return _row_to_trail(row) if row else None

    def get_trail_by_id(self, trail_id: int) -> Optional[Trail]:
        """Get a trail by internal id."""
        row = self.conn.execute(
            f"SELECT {_TRAIL_COLUMNS} FROM trails WHERE id = ?",
            [trail_id],
        ).fetchone()
        return _row_to_trail(row) if row else None

    # -------------------------------------------------------------------------
    # Weather Cache Operations
    # -------------------------------------------------------------------------

    def store_weather(self, region_id: str, days: Sequence[WeatherDay]) -> int:
        """Insert or update weather days for a region.

        Returns:
            Number of days written
        """
        fetched_at = datetime.utcnow()
        for day in days:
            self.conn.execute(
                """
                INSERT INTO weather_cache
                (region, date, precipitation_mm, temp_max_c, temp_min_c, humidity_pct, fetched_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (region, date)
                DO UPDATE SET
                    precipitation_mm = EXCLUDED.precipitation_mm,
                    temp_max_c = EXCLUDED.temp_max_c,
                    temp_min_c = EXCLUDED.temp_min_c,
                    humidity_pct = EXCLUDED.humidity_pct,
                    fetched_at = EXCLUDED.fetched_at
                """,
                [
                    region_id,
                    day.date,
                    day.precipitation_mm,
                    day.temp_max_c,
                    day.temp_min_c,
                    day.humidity_pct,
                    fetched_at,
                ],
            )
        return len(days)

    def get_weather_window(
        self,
        region_id: str,
        end_date: date,
        days: int = 7,
    ) -> list[WeatherDay]:
        """Get a region's trailing weather window, newest first.

        Args:
            region_id: Region id
            end_date: Last day of the window (usually today)
            days: Window length in days

        Returns:
            WeatherDay list covering end_date - (days - 1) through end_date
        """
        start_date = end_date - timedelta(days=days - 1)
        rows = self.conn.execute(
            """
            SELECT date, precipitation_mm, temp_max_c, temp_min_c, humidity_pct
            FROM weather_cache
            WHERE region = ? AND date BETWEEN ? AND ?
            ORDER BY date DESC
            """,
            [region_id, start_date, end_date],
        ).fetchall()
        return [self._row_to_weather(row) for row in rows]

    def get_weather_by_region(self, end_date: date, days: int = 7) -> dict[str, list[WeatherDay]]:
        """Get trailing weather windows for every region with data."""
        start_date = end_date - timedelta(days=days - 1)
        rows = self.conn.execute(
            """
            SELECT region, date, precipitation_mm, temp_max_c, temp_min_c, humidity_pct
            FROM weather_cache
            WHERE date BETWEEN ? AND ?
            ORDER BY region, date DESC
            """,
            [start_date, end_date],
        ).fetchall()

        weather: dict[str, list[WeatherDay]] = {}
        for row in rows:
            weather.setdefault(row[0], []).append(self._row_to_weather(row[1:]))
        return weather

    @staticmethod
    def _row_to_weather(row: tuple) -> WeatherDay:
        return WeatherDay(
            date=row[0],
            precipitation_mm=row[1] or 0.0,
            temp_max_c=row[2],
            temp_min_c=row[3],
            humidity_pct=row[4] if row[4] is not None else 50,
        )

    def cleanup_old_weather(self, keep_days: int = 30, today: Optional[date] = None) -> int:
        """Remove weather older than keep_days.

        Returns:
            Number of rows deleted
        """
        cutoff = (today or date.today()) - timedelta(days=keep_days)
        result = self.conn.execute(
            "DELETE FROM weather_cache WHERE date < ?",
            [cutoff],
        )
        deleted = result.fetchone()[0] if result else 0
        logger.info(f"Cleaned up {deleted} old weather records")
        return deleted

    # -------------------------------------------------------------------------
    # Prediction Operations
    # -------------------------------------------------------------------------

    def store_predictions(self, predictions: Iterable[Prediction], predicted_at: datetime) -> int:
        """Replace the stored prediction for each trail.

        Returns:
            Number of predictions written
        """
        count = 0
        for p in predictions:
            self.conn.execute(
                """
                INSERT INTO trail_predictions
                (cotrex_id, trail_id, name, centroid_lat, centroid_lon, open_to_bikes,
                 region, condition, confidence, hours_since_rain, effective_dry_hours,
                 factors, predicted_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (cotrex_id)
                DO UPDATE SET
                    trail_id = EXCLUDED.trail_id,
                    name = EXCLUDED.name,
                    centroid_lat = EXCLUDED.centroid_lat,
                    centroid_lon = EXCLUDED.centroid_lon,
                    open_to_bikes = EXCLUDED.open_to_bikes,
                    region = EXCLUDED.region,
                    condition = EXCLUDED.condition,
                    confidence = EXCLUDED.confidence,
                    hours_since_rain = EXCLUDED.hours_since_rain,
                    effective_dry_hours = EXCLUDED.effective_dry_hours,
                    factors = EXCLUDED.factors,
                    predicted_at = EXCLUDED.predicted_at
                """,
                [
                    p.cotrex_id,
                    p.trail_id,
                    p.name,
                    p.centroid_lat,
                    p.centroid_lon,
                    p.open_to_bikes,
                    p.region,
                    p.condition.value,
                    p.confidence,
                    p.hours_since_rain,
                    p.effective_dry_hours,
                    json.dumps(p.factors.to_dict()),
                    predicted_at,
                ],
            )
            count += 1
        logger.info(f"Stored {count} predictions")
        return count

    def get_predictions(self) -> list[Prediction]:
        """Get all stored predictions ordered by trail id."""
        rows = self.conn.execute(
            f"SELECT {_PREDICTION_COLUMNS} FROM trail_predictions ORDER BY trail_id"
        ).fetchall()
        return [_row_to_prediction(row) for row in rows]

    def get_prediction(self, cotrex_id: str) -> Optional[Prediction]:
        """Get the stored prediction for one trail."""
        row = self.conn.execute(
            f"SELECT {_PREDICTION_COLUMNS} FROM trail_predictions WHERE cotrex_id = ?",
            [cotrex_id],
        ).fetchone()
        return _row_to_prediction(row) if row else None

    def get_latest_prediction_time(self) -> Optional[datetime]:
        """Get the most recent prediction timestamp."""
        result = self.conn.execute(
            "SELECT MAX(predicted_at) FROM trail_predictions"
        ).fetchone()
        return result[0] if result and result[0] else None

    # -------------------------------------------------------------------------
    # Condition Report Operations
    # -------------------------------------------------------------------------

    def store_report(self, report: ConditionReport) -> int:
        """Store a user condition report.

        Returns:
            The new report id

        Raises:
            ValueError: If the condition is not a valid report value
        """
        if report.condition not in REPORT_CONDITIONS:
            raise ValueError(
                f"Invalid condition: {report.condition}. Must be one of {REPORT_CONDITIONS}"
            )

        reported_at = report.reported_at or datetime.utcnow()
        row = self.conn.execute(
            """
            INSERT INTO condition_reports (trail_id, condition, notes, reported_at, user_id)
            VALUES (?, ?, ?, ?, ?)
            RETURNING id
            """,
            [report.trail_id, report.condition, report.notes, reported_at, report.user_id],
        ).fetchone()
        return row[0]

    def get_reports(self, trail_id: Optional[int] = None, limit: int = 50) -> list[ConditionReport]:
        """Get recent condition reports, newest first."""
        sql = "SELECT id, trail_id, condition, notes, reported_at, user_id FROM condition_reports"
        params: list = []
        if trail_id is not None:
            sql += " WHERE trail_id = ?"
            params.append(trail_id)
        sql += " ORDER BY reported_at DESC LIMIT ?"
        params.append(limit)

        return [
            ConditionReport(
                id=row[0],
                trail_id=row[1],
                condition=row[2],
                notes=row[3],
                reported_at=row[4],
                user_id=row[5],
            )
            for row in self.conn.execute(sql, params).fetchall()
        ]

    # -------------------------------------------------------------------------
    # Logging Operations
    # -------------------------------------------------------------------------

    def log_fetch(
        self,
        source: str,
        status: str,
        records_added: int,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        """Log a data fetch operation."""
        self.conn.execute(
            """
            INSERT INTO fetch_log (source, timestamp, status, records_added, duration_ms, error_message)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [source, datetime.utcnow(), status, records_added, duration_ms, error_message],
        )

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get store statistics."""
        def count(table: str) -> int:
            return self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

        latest_weather = self.conn.execute(
            "SELECT MAX(date) FROM weather_cache"
        ).fetchone()[0]

        return {
            "trail_count": count("trails"),
            "weather_count": count("weather_cache"),
            "prediction_count": count("trail_predictions"),
            "report_count": count("condition_reports"),
            "latest_weather_date": latest_weather,
            "latest_prediction_time": self.get_latest_prediction_time(),
            "db_path": str(self.db_path),
        }
