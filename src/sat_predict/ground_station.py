"""
Ground station (observer) definitions.

A ground station is a fixed geodetic location with an optional horizon
mask giving the lowest visible elevation for each 10 degree azimuth sector.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from .constants import TWO_PI

logger = logging.getLogger(__name__)

HORIZON_SECTORS = 36
SECTOR_WIDTH_DEG = 360.0 / HORIZON_SECTORS


@dataclass(frozen=True)
class GroundStationPosition:
    """
    Observer location for topocentric calculations.

    The station itself holds no derived sidereal state; the sidereal
    angle is computed per evaluation by the propagator.
    """

    latitude: float  # degrees, north positive
    longitude: float  # degrees, east positive
    height_amsl: float = 0.0  # metres above mean sea level
    horizon_elevations: Optional[Tuple[int, ...]] = None  # degrees, one per 10 deg sector
    name: str = ""

    def __post_init__(self) -> None:
        """Validate station parameters after initialization."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude must be between -90 and 90 degrees, got {self.latitude}")
        if not math.isfinite(self.longitude):
            raise ValueError(f"Longitude must be finite, got {self.longitude}")
        if self.horizon_elevations is not None:
            mask = tuple(int(value) for value in self.horizon_elevations)
            if len(mask) != HORIZON_SECTORS:
                raise ValueError(
                    f"Expected {HORIZON_SECTORS} Horizon Elevations, got: {len(mask)}"
                )
            object.__setattr__(self, "horizon_elevations", mask)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroundStationPosition":
        values = dict(data)
        mask: Optional[Sequence[int]] = values.pop("horizon_elevations", None)
        return cls(
            horizon_elevations=tuple(mask) if mask is not None else None,
            **values,
        )

    def with_horizon_mask(self, elevations: Sequence[int]) -> "GroundStationPosition":
        """Return a copy of this station with the given horizon mask."""
        return GroundStationPosition(
            latitude=self.latitude,
            longitude=self.longitude,
            height_amsl=self.height_amsl,
            horizon_elevations=tuple(elevations),
            name=self.name,
        )

    @property
    def has_horizon_mask(self) -> bool:
        return self.horizon_elevations is not None

    def horizon_elevation(self, azimuth: float) -> float:
        """
        Minimum visible elevation for an azimuth.

        Args:
            azimuth: Azimuth in radians, 0..2pi

        Returns:
            Mask elevation in degrees, 0 when no mask is configured
        """
        if self.horizon_elevations is None:
            return 0.0
        sector = int(azimuth / TWO_PI * 360.0 / SECTOR_WIDTH_DEG) % HORIZON_SECTORS
        return float(self.horizon_elevations[sector])

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "height_amsl": self.height_amsl,
        }
        if self.name:
            result["name"] = self.name
        if self.horizon_elevations is not None:
            result["horizon_elevations"] = list(self.horizon_elevations)
        return result

    def __str__(self) -> str:
        label = self.name or "Station"
        return f"{label} ({self.latitude:.4f}°, {self.longitude:.4f}°, {self.height_amsl:.0f} m)"
