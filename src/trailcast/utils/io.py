"""I/O utilities for data paths and file operations."""

from pathlib import Path

# Project root is 4 levels up from this file
_PROJECT_ROOT = Path(__file__).parent.parent.parent.parent

VALID_PIPELINES = {"open_meteo", "trails", "predictions"}
VALID_STAGES = {"raw", "processed", "cache"}


def get_data_path(pipeline: str, stage: str = "raw") -> Path:
    """Get standardized data path for a pipeline.

    Args:
        pipeline: One of 'open_meteo', 'trails', 'predictions'
        stage: One of 'raw', 'processed', 'cache'

    Returns:
        Path to the data directory (creates if doesn't exist)

    Example:
        >>> path = get_data_path("open_meteo", "raw")
        >>> path
        PosixPath('.../trailcast/data/raw/open_meteo')
    """
    if pipeline not in VALID_PIPELINES:
        raise ValueError(f"Invalid pipeline: {pipeline}. Must be one of {VALID_PIPELINES}")
    if stage not in VALID_STAGES:
        raise ValueError(f"Invalid stage: {stage}. Must be one of {VALID_STAGES}")

    path = _PROJECT_ROOT / "data" / stage / pipeline
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_project_root() -> Path:
    """Get the project root directory."""
    return _PROJECT_ROOT
