"""Tests for base pipeline classes."""

from pathlib import Path

import pandas as pd
import pytest

from trailcast.utils.base import (
    BasePipeline,
    StaticPipeline,
    TemporalPipeline,
    ValidationResult,
)


class TestValidationResult:
    """Tests for ValidationResult dataclass."""

    def test_defaults(self):
        """Issues and stats default to empty."""
        result = ValidationResult(valid=True, total_rows=10, missing_pct=0.0)
        assert result.outliers_count == 0
        assert result.issues == []
        assert result.stats == {}

    def test_str_valid(self):
        """Should format valid result as string."""
        result = ValidationResult(valid=True, total_rows=1000, missing_pct=5.0, outliers_count=10)
        assert str(result) == "ValidationResult(VALID, rows=1000, missing=5.0%, outliers=10)"

    def test_str_invalid(self):
        """Should format invalid result as string."""
        result = ValidationResult(valid=False, total_rows=100, missing_pct=50.0)
        assert "INVALID" in str(result)


class _FakeWeatherPipeline(TemporalPipeline):
    def __init__(self, rows):
        self.rows = rows

    def download(self, start_date, end_date, **kwargs):
        return Path(f"/tmp/{start_date}_{end_date}.json")

    def process(self, raw_path):
        return pd.DataFrame({"value": self.rows})

    def validate(self, data):
        return ValidationResult(
            valid=not data.empty,
            total_rows=len(data),
            missing_pct=0.0,
            issues=[] if not data.empty else ["No rows"],
        )


class _FakeTrailPipeline(StaticPipeline):
    def download(self, **kwargs):
        return Path("/tmp/trails.json")

    def process(self, raw_path):
        return ["trail"]

    def validate(self, data):
        return ValidationResult(valid=True, total_rows=len(data), missing_pct=0.0)


class TestBasePipeline:
    """Tests for the abstract base classes."""

    def test_cannot_instantiate(self):
        """Abstract classes cannot be instantiated."""
        with pytest.raises(TypeError):
            BasePipeline()

    def test_temporal_run(self):
        """run() chains download, process and validate."""
        df, validation = _FakeWeatherPipeline([1, 2, 3]).run("2024-07-01", "2024-07-07")
        assert len(df) == 3
        assert validation.valid

    def test_temporal_run_raises_on_invalid(self):
        """Invalid data raises by default."""
        with pytest.raises(ValueError, match="Data validation failed"):
            _FakeWeatherPipeline([]).run("2024-07-01", "2024-07-07")

    def test_temporal_run_can_skip_raise(self):
        """raise_on_invalid=False returns the invalid result."""
        _, validation = _FakeWeatherPipeline([]).run(
            "2024-07-01", "2024-07-07", raise_on_invalid=False
        )
        assert not validation.valid

    def test_static_run(self):
        """Static pipelines run without dates."""
        data, validation = _FakeTrailPipeline().run()
        assert data == ["trail"]
        assert validation.total_rows == 1
