"""Open-Meteo daily weather pipeline.

Fetches daily precipitation, temperature and humidity for each weather
region. Open-Meteo needs no API key.

Data Source:
- https://api.open-meteo.com/v1/forecast (daily aggregates, past_days window)
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd
import requests

from trailcast.engine.models import Region, WeatherDay
from trailcast.engine.regions import REGIONS_DATA
from trailcast.utils import TemporalPipeline, ValidationResult
from trailcast.utils.io import get_data_path

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
DAILY_VARIABLES = (
    "precipitation_sum",
    "temperature_2m_max",
    "temperature_2m_min",
    "relative_humidity_2m_mean",
)
TIMEZONE = "America/Denver"

# Request timeout in seconds
REQUEST_TIMEOUT = 30

DEFAULT_PAST_DAYS = 7
DEFAULT_FORECAST_DAYS = 1
DEFAULT_HUMIDITY_PCT = 50

WEATHER_COLUMNS = [
    "region",
    "date",
    "precipitation_mm",
    "temp_max_c",
    "temp_min_c",
    "humidity_pct",
]


class OpenMeteoPipeline(TemporalPipeline):
    """Daily regional weather from Open-Meteo.

    Example:
        >>> pipeline = OpenMeteoPipeline()
        >>> df = pipeline.fetch_region(REGIONS_DATA[0])
        >>> df[["date", "precipitation_mm"]]
    """

    def __init__(
        self,
        regions: Optional[Sequence[Region]] = None,
        raw_path: Optional[Path] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            regions: Regions to fetch. Defaults to REGIONS_DATA.
            raw_path: Directory for raw responses. Defaults to data/raw/open_meteo.
        """
        self.regions = list(regions) if regions is not None else list(REGIONS_DATA)
        self._raw_path = raw_path

    @property
    def raw_path(self) -> Path:
        if self._raw_path is None:
            self._raw_path = get_data_path("open_meteo", "raw")
        return self._raw_path

    def build_params(
        self,
        region: Region,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        past_days: int = DEFAULT_PAST_DAYS,
        forecast_days: int = DEFAULT_FORECAST_DAYS,
    ) -> dict[str, str]:
        """Query parameters for one region.

        An explicit date range replaces the past_days/forecast_days window.
        """
        params = {
            "latitude": str(region.lat),
            "longitude": str(region.lon),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": TIMEZONE,
        }
        if start_date and end_date:
            params["start_date"] = start_date
            params["end_date"] = end_date
        else:
            params["past_days"] = str(past_days)
            params["forecast_days"] = str(forecast_days)
        return params

    def request(self, params: dict[str, str]) -> dict[str, Any]:
        """Call the Open-Meteo API.

        Raises:
            requests.HTTPError: If the request fails.
        """
        response = requests.get(OPEN_METEO_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def fetch_region(
        self,
        region: Region,
        past_days: int = DEFAULT_PAST_DAYS,
        forecast_days: int = DEFAULT_FORECAST_DAYS,
    ) -> pd.DataFrame:
        """Fetch the trailing weather window for one region.

        Args:
            region: Region to fetch
            past_days: Days of history
            forecast_days: Days of forecast (1 = today)

        Returns:
            DataFrame with WEATHER_COLUMNS

        Raises:
            requests.HTTPError: If the request fails.
        """
        params = self.build_params(region, past_days=past_days, forecast_days=forecast_days)
        payload = self.request(params)
        df = parse_daily_response(region.id, payload)
        logger.debug(f"{region.name}: {len(df)} days")
        return df

    def download(self, start_date: str, end_date: str, **kwargs) -> list[Path]:
        """Download raw responses for every region over a date range.

        Args:
            start_date: Start date in YYYY-MM-DD format
            end_date: End date in YYYY-MM-DD format

        Returns:
            One JSON file per region.
        """
        paths = []
        for region in self.regions:
            params = self.build_params(region, start_date=start_date, end_date=end_date)
            payload = self.request(params)

            output_path = self.raw_path / f"{region.id}_{start_date}_{end_date}.json"
            with open(output_path, "w") as f:
                json.dump({"region": region.id, "response": payload}, f)
            paths.append(output_path)

        logger.info(f"Downloaded Open-Meteo data for {len(paths)} regions")
        return paths

    def process(self, raw_path: Path | list[Path]) -> pd.DataFrame:
        """Combine raw region responses into one DataFrame."""
        paths = raw_path if isinstance(raw_path, list) else [raw_path]
        frames = []
        for path in paths:
            with open(path) as f:
                data = json.load(f)
            frames.append(parse_daily_response(data["region"], data["response"]))

        if not frames:
            return pd.DataFrame(columns=WEATHER_COLUMNS)
        return pd.concat(frames, ignore_index=True)

    def validate(self, data: Any) -> ValidationResult:
        """Check weather rows for duplicates and out-of-range values."""
        if not isinstance(data, pd.DataFrame):
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["Data is not a DataFrame"],
            )

        if data.empty:
            return ValidationResult(
                valid=False,
                total_rows=0,
                missing_pct=100.0,
                issues=["No weather rows"],
            )

        issues = []
        missing_cols = [c for c in WEATHER_COLUMNS if c not in data.columns]
        if missing_cols:
            return ValidationResult(
                valid=False,
                total_rows=len(data),
                missing_pct=100.0,
                issues=[f"Missing columns: {missing_cols}"],
            )

        values = data[["precipitation_mm", "temp_max_c", "temp_min_c"]]
        missing_pct = float(values.isna().mean().mean() * 100)
        if data["temp_max_c"].isna().any() or data["temp_min_c"].isna().any():
            issues.append("Missing temperatures")

        duplicates = int(data.duplicated(subset=["region", "date"]).sum())
        if duplicates:
            issues.append(f"{duplicates} duplicate region/date rows")

        negative_precip = int((data["precipitation_mm"] < 0).sum())
        bad_humidity = int((~data["humidity_pct"].between(0, 100)).sum())
        outliers = negative_precip + bad_humidity
        if negative_precip:
            issues.append(f"{negative_precip} negative precipitation values")
        if bad_humidity:
            issues.append(f"{bad_humidity} humidity values outside 0-100")

        return ValidationResult(
            valid=not issues,
            total_rows=len(data),
            missing_pct=missing_pct,
            outliers_count=outliers,
            issues=issues,
            stats={
                "regions": int(data["region"].nunique()),
                "total_precip_mm": float(data["precipitation_mm"].sum()),
            },
        )


def parse_daily_response(region_id: str, payload: dict[str, Any]) -> pd.DataFrame:
    """Turn an Open-Meteo daily payload into weather rows.

    Missing precipitation counts as dry; missing humidity defaults to 50%.

    Args:
        region_id: Region the payload belongs to
        payload: Decoded JSON response

    Returns:
        DataFrame with WEATHER_COLUMNS
    """
    daily = payload.get("daily") or {}
    dates = daily.get("time") or []
    n = len(dates)

    def column(name: str) -> pd.Series:
        values = daily.get(name)
        if values is None:
            values = [None] * n
        return pd.Series(values, dtype="float64")

    humidity = column("relative_humidity_2m_mean").fillna(DEFAULT_HUMIDITY_PCT)

    df = pd.DataFrame({
        "region": [region_id] * n,
        "date": pd.to_datetime(pd.Series(dates, dtype="object")).dt.date,
        "precipitation_mm": column("precipitation_sum").fillna(0.0),
        "temp_max_c": column("temperature_2m_max"),
        "temp_min_c": column("temperature_2m_min"),
        # Half-up rounding
        "humidity_pct": np.floor(humidity.to_numpy() + 0.5).astype(int),
    })
    return df[WEATHER_COLUMNS]


def frame_to_weather_days(df: pd.DataFrame) -> list[WeatherDay]:
    """Convert weather rows into WeatherDay values, newest first.

    Rows without temperatures are dropped; a later row for the same date
    replaces an earlier one.
    """
    if df.empty:
        return []

    complete = df.dropna(subset=["temp_max_c", "temp_min_c"])
    dropped = len(df) - len(complete)
    if dropped:
        logger.warning(f"Dropped {dropped} weather rows without temperatures")

    deduped = complete.drop_duplicates(subset=["date"], keep="last")
    deduped = deduped.sort_values("date", ascending=False)

    return [
        WeatherDay(
            date=row.date,
            precipitation_mm=float(row.precipitation_mm),
            temp_max_c=float(row.temp_max_c),
            temp_min_c=float(row.temp_min_c),
            humidity_pct=int(row.humidity_pct),
        )
        for row in deduped.itertuples(index=False)
    ]


def weather_by_region(df: pd.DataFrame) -> dict[str, list[WeatherDay]]:
    """Group weather rows into per-region WeatherDay windows."""
    if df.empty:
        return {}
    return {
        region_id: frame_to_weather_days(group)
        for region_id, group in df.groupby("region", sort=False)
    }
