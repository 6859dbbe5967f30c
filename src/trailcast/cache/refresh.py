"""Daily refresh: regional weather, trail predictions, exported JSON.

Run once a day (or more) to keep predictions current:

    # Every day at 06:00 Mountain
    0 6 * * * python -m trailcast.cache.refresh

Usage:
    python -m trailcast.cache.refresh                          # Weather, then predictions
    python -m trailcast.cache.refresh --weather                # Weather only
    python -m trailcast.cache.refresh --predict                # Predictions only
    python -m trailcast.cache.refresh --load-trails trails.json
    python -m trailcast.cache.refresh --status                 # Show store status
"""

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from trailcast.api.schemas import PredictionsDocument, TrailPredictionSchema
from trailcast.cache.database import DEFAULT_DB_PATH, CacheDatabase
from trailcast.engine.batch import BatchResult, run_batch, select_bike_trails
from trailcast.engine.models import Region
from trailcast.engine.precipitation import RECENT_PRECIP_DAYS
from trailcast.pipelines.open_meteo import OpenMeteoPipeline, frame_to_weather_days
from trailcast.pipelines.trails import load_trails
from trailcast.utils.io import get_data_path

# Configure logging
logger = logging.getLogger(__name__)

COVERAGE_NAME = "Colorado"
PREDICTIONS_FILENAME = "trail-predictions.json"
WEATHER_KEEP_DAYS = 30


@dataclass
class RefreshResult:
    """Result of a refresh operation."""

    total: int
    success: int
    failed: int
    skipped: int
    duration_ms: int

    @property
    def success_rate(self) -> float:
        """Percentage of successful refreshes."""
        if self.total == 0:
            return 0.0
        return (self.success / self.total) * 100

    def __str__(self) -> str:
        return (
            f"Refresh complete: {self.success}/{self.total} successful, "
            f"{self.failed} failed, {self.skipped} skipped "
            f"({self.duration_ms}ms)"
        )


def default_output_path() -> Path:
    return get_data_path("predictions", "processed") / PREDICTIONS_FILENAME


def refresh_weather_for_regions(
    db: CacheDatabase,
    regions: Optional[Sequence[Region]] = None,
    pipeline: Optional[OpenMeteoPipeline] = None,
) -> RefreshResult:
    """Fetch the trailing weather window for every region.

    A failed region is logged and counted; the rest still run.

    Args:
        db: CacheDatabase instance
        regions: Regions to refresh. Defaults to the stored region table.
        pipeline: Weather pipeline. Defaults to OpenMeteoPipeline.

    Returns:
        RefreshResult with counts of successful/failed regions
    """
    if regions is None:
        regions = db.get_regions()
    if pipeline is None:
        pipeline = OpenMeteoPipeline(regions)

    start_time = time.time()

    total = len(regions)
    success = 0
    failed = 0
    skipped = 0

    logger.info(f"Starting weather refresh for {total} regions...")

    for i, region in enumerate(regions, 1):
        region_start = time.time()
        try:
            df = pipeline.fetch_region(region)
            days = frame_to_weather_days(df)

            if not days:
                logger.warning(f"[{i}/{total}] {region.name}: no weather returned")
                skipped += 1
                continue

            stored = db.store_weather(region.id, days)
            db.log_fetch(
                source=f"open_meteo:{region.id}",
                status="success",
                records_added=stored,
                duration_ms=int((time.time() - region_start) * 1000),
            )
            logger.info(f"[{i}/{total}] {region.name}: cached {stored} days")
            success += 1

        except Exception as e:
            logger.error(f"[{i}/{total}] {region.name}: failed - {e}")
            db.log_fetch(
                source=f"open_meteo:{region.id}",
                status="error",
                records_added=0,
                duration_ms=int((time.time() - region_start) * 1000),
                error_message=str(e),
            )
            failed += 1

    duration_ms = int((time.time() - start_time) * 1000)

    result = RefreshResult(
        total=total,
        success=success,
        failed=failed,
        skipped=skipped,
        duration_ms=duration_ms,
    )

    logger.info(str(result))
    return result


def load_trails_into_db(db: CacheDatabase, path: Path) -> int:
    """Import a trail JSON file into the store.

    Returns:
        Number of trails stored
    """
    trails = load_trails(path)
    return db.store_trails(trails)


def build_predictions_document(result: BatchResult) -> PredictionsDocument:
    """Wrap a batch result in the exported document shape."""
    return PredictionsDocument(
        generated_at=result.generated_at,
        region=COVERAGE_NAME,
        total_trails=result.total,
        summary=dict(result.summary),
        trails=[TrailPredictionSchema.from_prediction(p) for p in result.predictions],
    )


def write_predictions_json(document: PredictionsDocument, output_path: Path) -> Path:
    """Write the predictions document as JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(document.model_dump_json(indent=2))
    logger.info(f"Wrote {document.total_trails} predictions to {output_path}")
    return output_path


def generate_predictions(
    db: CacheDatabase,
    now: Optional[datetime] = None,
    bikes_only: bool = True,
    output_path: Optional[Path] = None,
) -> BatchResult:
    """Classify stored trails against stored weather and persist the results.

    Args:
        db: CacheDatabase instance
        now: Run time. Sampled once here when not given.
        bikes_only: Only classify trails open to bikes
        output_path: Where to write the predictions JSON. None skips the file.

    Returns:
        BatchResult for the run
    """
    if now is None:
        now = datetime.now()

    trails = db.get_trails()
    if bikes_only:
        trails = select_bike_trails(trails)
    regions = db.get_regions()
    weather = db.get_weather_by_region(now.date(), days=RECENT_PRECIP_DAYS)

    logger.info(
        f"Generating predictions for {len(trails)} trails "
        f"({len(weather)}/{len(regions)} regions with weather)"
    )

    result = run_batch(trails, weather, regions=regions, now=now)
    db.store_predictions(result.predictions, predicted_at=now)

    if output_path is not None:
        write_predictions_json(build_predictions_document(result), output_path)

    return result


def refresh_all(
    db_path: Optional[Path] = None,
    output_path: Optional[Path] = None,
    bikes_only: bool = True,
) -> tuple[RefreshResult, BatchResult]:
    """Refresh weather for every region, then regenerate predictions.

    This is the main entry point for the daily job.

    Args:
        db_path: Path to DuckDB file. Uses default if not specified.
        output_path: Predictions JSON path. Uses the default data path if not specified.
        bikes_only: Only classify trails open to bikes

    Returns:
        Tuple of (weather RefreshResult, predictions BatchResult)
    """
    db = CacheDatabase(db_path or DEFAULT_DB_PATH)

    try:
        logger.info("=" * 60)
        logger.info("Starting daily refresh...")
        logger.info(f"Database: {db.db_path}")
        logger.info("=" * 60)

        weather_result = refresh_weather_for_regions(db)
        batch_result = generate_predictions(
            db,
            bikes_only=bikes_only,
            output_path=output_path or default_output_path(),
        )
        db.cleanup_old_weather(keep_days=WEATHER_KEEP_DAYS)

        logger.info("=" * 60)
        logger.info("Daily refresh complete:")
        logger.info(f"  Weather:     {weather_result}")
        logger.info(f"  Predictions: {batch_result}")
        logger.info("=" * 60)

        return weather_result, batch_result

    finally:
        db.close()


def get_cache_status(db_path: Optional[Path] = None) -> dict:
    """Get current store status.

    Args:
        db_path: Path to DuckDB file. Uses default if not specified.

    Returns:
        Dict with store statistics and per-region weather status
    """
    db = CacheDatabase(db_path or DEFAULT_DB_PATH)

    try:
        stats = db.get_stats()
        latest = stats["latest_weather_date"]
        weather = db.get_weather_by_region(latest) if latest else {}

        region_status = []
        for region in db.get_regions():
            days = weather.get(region.id, [])
            region_status.append({
                "id": region.id,
                "name": region.name,
                "weather_days": len(days),
                "latest_date": days[0].date if days else None,
            })

        return {
            "db_path": stats["db_path"],
            "trail_count": stats["trail_count"],
            "weather_count": stats["weather_count"],
            "prediction_count": stats["prediction_count"],
            "report_count": stats["report_count"],
            "latest_weather_date": latest,
            "latest_prediction_time": stats["latest_prediction_time"],
            "regions": region_status,
        }

    finally:
        db.close()


def print_status(status: dict) -> None:
    """Print store status in human-readable format."""
    print()
    print("=" * 60)
    print("Trail Conditions Store Status")
    print("=" * 60)
    print(f"Database: {status['db_path']}")
    print(f"Trails: {status['trail_count']}")
    print(f"Weather records: {status['weather_count']}")
    print(f"Predictions: {status['prediction_count']}")
    print(f"Condition reports: {status['report_count']}")

    if status["latest_weather_date"]:
        print(f"Latest weather date: {status['latest_weather_date']}")
    if status["latest_prediction_time"]:
        print(f"Latest predictions: {status['latest_prediction_time']}")

    print()
    print("Region Status:")
    print("-" * 60)

    for region in status["regions"]:
        weather_status = "OK" if region["weather_days"] else "MISSING"
        latest = region["latest_date"] or "N/A"
        print(f"  {region['name']:<25} Weather:{weather_status:<8} ({region['weather_days']} days, {latest})")

    print("=" * 60)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for the daily refresh."""
    parser = argparse.ArgumentParser(
        description="Refresh weather and trail condition predictions",
        epilog="""
Examples:
  python -m trailcast.cache.refresh                             # Weather + predictions
  python -m trailcast.cache.refresh --weather                   # Weather only
  python -m trailcast.cache.refresh --predict --output out.json # Predictions only
  python -m trailcast.cache.refresh --load-trails trails.json   # Import trails
  python -m trailcast.cache.refresh --status                    # Show status

Cron setup (daily at 06:00):
  0 6 * * * cd /path/to/trailcast && python -m trailcast.cache.refresh >> /var/log/trailcast-refresh.log 2>&1
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--load-trails",
        type=Path,
        default=None,
        metavar="FILE",
        help="Import trails from a JSON file",
    )
    parser.add_argument(
        "--weather",
        action="store_true",
        help="Refresh regional weather only",
    )
    parser.add_argument(
        "--predict",
        action="store_true",
        help="Generate predictions only",
    )
    parser.add_argument(
        "--all-trails",
        action="store_true",
        help="Include trails closed to bikes",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Predictions JSON path (default: data/processed/predictions/trail-predictions.json)",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show current store status",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Database path (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )

    args = parser.parse_args(argv)

    # Configure logging
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Handle status command
    if args.status:
        status = get_cache_status(args.db)
        print_status(status)
        return 0

    bikes_only = not args.all_trails

    db = CacheDatabase(args.db or DEFAULT_DB_PATH)

    try:
        exit_code = 0

        if args.load_trails:
            count = load_trails_into_db(db, args.load_trails)
            logger.info(f"Imported {count} trails from {args.load_trails}")
            if not (args.weather or args.predict):
                return 0

        if args.weather or not args.predict:
            result = refresh_weather_for_regions(db)
            if result.failed > 0:
                exit_code = 1

        if args.predict or not args.weather:
            generate_predictions(
                db,
                bikes_only=bikes_only,
                output_path=args.output or default_output_path(),
            )
            db.cleanup_old_weather(keep_days=WEATHER_KEEP_DAYS)

        return exit_code

    except Exception as e:
        logger.error(f"Refresh failed: {e}")
        return 1

    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
