"""Base classes and protocols for ingestion pipelines."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd


@dataclass
class ValidationResult:
    """Result of data validation.

    Attributes:
        valid: Whether the data passed all validation checks
        total_rows: Total number of rows/records in the dataset
        missing_pct: Percentage of missing values (0-100)
        outliers_count: Number of out-of-range values detected
        issues: List of validation issues found
        stats: Dictionary of summary statistics
    """

    valid: bool
    total_rows: int
    missing_pct: float
    outliers_count: int = 0
    issues: list[str] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        status = "VALID" if self.valid else "INVALID"
        return (
            f"ValidationResult({status}, "
            f"rows={self.total_rows}, "
            f"missing={self.missing_pct:.1f}%, "
            f"outliers={self.outliers_count})"
        )


class BasePipeline(ABC):
    """Abstract base class for all ingestion pipelines.

    Use TemporalPipeline for dated records (weather).
    Use StaticPipeline for static records (trails).
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """Validate data for quality and completeness.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with quality metrics and issues
        """
        pass

    @staticmethod
    def _check_valid(validation: ValidationResult, raise_on_invalid: bool) -> None:
        if raise_on_invalid and not validation.valid:
            raise ValueError(
                f"Data validation failed: {validation.issues}. "
                f"Missing: {validation.missing_pct:.1f}%, "
                f"Outliers: {validation.outliers_count}"
            )


class TemporalPipeline(BasePipeline):
    """Base class for dated data pipelines (daily weather).

    These pipelines download data for a date range and produce DataFrames.
    """

    @abstractmethod
    def download(self, start_date: str, end_date: str, **kwargs) -> Path | list[Path]:
        """Download raw data from the source for a date range.

        Args:
            start_date: Start date in YYYY-MM-DD format
            end_date: End date in YYYY-MM-DD format
            **kwargs: Additional source-specific parameters

        Returns:
            Path to downloaded data, or list of Paths for per-region files.
        """
        pass

    @abstractmethod
    def process(self, raw_path: Path | list[Path]) -> pd.DataFrame:
        """Process raw data into standardized DataFrame format.

        Args:
            raw_path: Path(s) to raw data from download().

        Returns:
            DataFrame with standardized columns and types
        """
        pass

    def run(
        self,
        start_date: str,
        end_date: str,
        raise_on_invalid: bool = True,
        **kwargs
    ) -> tuple[pd.DataFrame, ValidationResult]:
        """Run the full pipeline: download → process → validate.

        Args:
            start_date: Start date in YYYY-MM-DD format
            end_date: End date in YYYY-MM-DD format
            raise_on_invalid: If True, raise ValueError when validation fails
            **kwargs: Additional parameters passed to download()

        Returns:
            Tuple of (processed DataFrame, validation result)

        Raises:
            ValueError: If raise_on_invalid=True and validation fails
        """
        raw_path = self.download(start_date, end_date, **kwargs)
        df = self.process(raw_path)
        validation = self.validate(df)
        self._check_valid(validation, raise_on_invalid)
        return df, validation


class StaticPipeline(BasePipeline):
    """Base class for static data pipelines (trail records).

    These pipelines load data once rather than per date range.
    """

    @abstractmethod
    def download(self, **kwargs) -> Path:
        """Fetch or locate the static source data.

        Args:
            **kwargs: Source-specific parameters

        Returns:
            Path to the raw data.
        """
        pass

    @abstractmethod
    def process(self, raw_path: Path) -> Any:
        """Process raw data into usable format.

        Args:
            raw_path: Path to raw data from download().

        Returns:
            Processed data
        """
        pass

    def run(
        self,
        raise_on_invalid: bool = True,
        **kwargs
    ) -> tuple[Any, ValidationResult]:
        """Run the full pipeline: download → process → validate.

        Args:
            raise_on_invalid: If True, raise ValueError when validation fails
            **kwargs: Parameters passed to download()

        Returns:
            Tuple of (processed data, validation result)

        Raises:
            ValueError: If raise_on_invalid=True and validation fails
        """
        raw_path = self.download(**kwargs)
        data = self.process(raw_path)
        validation = self.validate(data)
        self._check_valid(validation, raise_on_invalid)
        return data, validation
