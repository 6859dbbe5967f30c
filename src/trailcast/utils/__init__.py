"""Shared utilities for trailcast pipelines."""

from .base import (
    BasePipeline,
    StaticPipeline,
    TemporalPipeline,
    ValidationResult,
)
from .geo import COLORADO_BBOX, MAP_BOUNDS, BoundingBox
from .io import get_data_path

__all__ = [
    "get_data_path",
    "BoundingBox",
    "COLORADO_BBOX",
    "MAP_BOUNDS",
    "BasePipeline",
    "TemporalPipeline",
    "StaticPipeline",
    "ValidationResult",
]
