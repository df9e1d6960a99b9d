"""
Utility functions for the satellite predictor.

Logging setup, datetime parsing and display formatting shared by the
command-line interface.
"""

import logging
import math
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "SAT_PREDICT_LOG_LEVEL"


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        SAT_PREDICT_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Parse datetime string in various formats.

    Args:
        date_string: Date string to parse

    Returns:
        Parsed datetime object (naive UTC)

    Raises:
        ValueError: If date string cannot be parsed
    """
    formats = [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            dt = datetime.strptime(date_string, fmt)
        except ValueError:
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).replace(tzinfo=None)

    raise ValueError(f"Could not parse datetime string: {date_string}")


def get_current_utc() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current UTC datetime (timezone-naive)
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def degrees_to_dms(degrees: float) -> tuple:
    """
    Convert decimal degrees to degrees, minutes, seconds.

    Returns:
        Tuple of (degrees, minutes, seconds)
    """
    abs_degrees = abs(degrees)
    d = int(abs_degrees)
    m = int((abs_degrees - d) * 60)
    s = ((abs_degrees - d) * 60 - m) * 60

    return (d, m, s)


def format_coordinates(latitude: float, longitude: float, format: str = "decimal") -> str:
    """
    Format coordinates for display.

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees, east positive
        format: Format type ("decimal" or "dms")

    Returns:
        Formatted coordinate string
    """
    if format == "decimal":
        return f"{latitude:.4f}°, {longitude:.4f}°"
    elif format == "dms":
        lat_d, lat_m, lat_s = degrees_to_dms(latitude)
        lon_d, lon_m, lon_s = degrees_to_dms(longitude)

        lat_dir = "N" if latitude >= 0 else "S"
        lon_dir = "E" if longitude >= 0 else "W"

        return (
            f"{lat_d}°{lat_m}'{lat_s:.1f}\"{lat_dir}, "
            f"{lon_d}°{lon_m}'{lon_s:.1f}\"{lon_dir}"
        )
    else:
        raise ValueError(f"Unknown format: {format}")


def signed_longitude(longitude_deg: float) -> float:
    """Map an east longitude in 0..360 degrees to -180..180."""
    return math.remainder(longitude_deg, 360.0)


def ensure_directory_exists(directory: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if it doesn't.

    Returns:
        Path object for the directory
    """
    dir_path = Path(directory)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path
