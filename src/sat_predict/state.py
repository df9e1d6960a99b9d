"""
Satellite state snapshots produced by the propagator.

Every evaluation produces fresh, immutable values; nothing here carries
history between evaluations.
"""

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from .constants import EARTH_RADIUS_KM, FOOTPRINT_EARTH_RADIUS_KM, TWO_PI


@dataclass(frozen=True, eq=False)
class InertialState:
    """Earth-centred inertial position (km) and velocity (km/s) at one instant."""

    time: datetime
    julian_date: float
    tsince: float  # minutes since element set epoch
    position: np.ndarray
    velocity: np.ndarray
    phase: float  # radians
    converged: bool = True

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


class EclipseState(NamedTuple):
    """Eclipse depth in radians (negative means sunlit) and the eclipsed flag."""

    depth: float
    eclipsed: bool


class LookAngles(NamedTuple):
    azimuth: float
    elevation: float
    range: float
    range_rate: float
    above_horizon: bool


@dataclass(frozen=True)
class SatelliteState:
    """
    Position snapshot of a satellite.

    Angles are in radians, distances in km and range rate in km/s.
    The topocentric fields are None unless the state was evaluated
    for a ground station.
    """

    time: datetime
    latitude: float
    longitude: float  # 0..2pi, east positive
    altitude: float
    phase: float
    theta: float
    eclipse_depth: float
    eclipsed: bool
    azimuth: Optional[float] = None
    elevation: Optional[float] = None
    range: Optional[float] = None
    range_rate: Optional[float] = None
    above_horizon: Optional[bool] = None
    converged: bool = True

    @property
    def has_look_angles(self) -> bool:
        return self.elevation is not None

    @property
    def latitude_deg(self) -> float:
        return math.degrees(self.latitude)

    @property
    def longitude_deg(self) -> float:
        return math.degrees(self.longitude)

    @property
    def azimuth_deg(self) -> Optional[float]:
        return None if self.azimuth is None else self.azimuth / TWO_PI * 360.0

    @property
    def elevation_deg(self) -> Optional[float]:
        return None if self.elevation is None else self.elevation / TWO_PI * 360.0

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["time"] = self.time.isoformat()
        result["latitude_deg"] = round(self.latitude_deg, 4)
        result["longitude_deg"] = round(self.longitude_deg, 4)
        if self.has_look_angles:
            result["azimuth_deg"] = round(self.azimuth_deg, 2)
            result["elevation_deg"] = round(self.elevation_deg, 2)
        return result

    def range_circle(self) -> List[Tuple[float, float]]:
        """
        Footprint of the satellite on the Earth's surface.

        Returns:
            360 (latitude, longitude) points in degrees, one per degree of
            azimuth around the sub-satellite point; longitudes are 0..360
        """
        return calculate_range_circle(self.latitude, self.longitude, self.altitude)

    def __str__(self) -> str:
        text = (
            f"{self.time.isoformat()} "
            f"lat {self.latitude_deg:.2f}° lon {self.longitude_deg:.2f}° "
            f"alt {self.altitude:.1f} km"
        )
        if self.has_look_angles:
            text += (
                f", az {self.azimuth_deg:.1f}° el {self.elevation_deg:.1f}° "
                f"range {self.range:.0f} km"
            )
        if self.eclipsed:
            text += ", eclipsed"
        return text


def calculate_range_circle(
    latitude: float, longitude: float, altitude: float
) -> List[Tuple[float, float]]:
    """
    Points on the edge of the visibility footprint of a sub-satellite point.

    Args:
        latitude: Sub-satellite latitude in radians
        longitude: Sub-satellite longitude in radians
        altitude: Satellite altitude in km

    Returns:
        List of 360 (latitude_deg, longitude_deg) tuples
    """
    diameter = int(12756.33 * math.acos(EARTH_RADIUS_KM / (EARTH_RADIUS_KM + altitude)))
    beta = (0.5 * diameter) / FOOTPRINT_EARTH_RADIUS_KM
    points = []

    for azi in range(360):
        azimuth = azi / 360.0 * TWO_PI
        range_lat = math.asin(
            math.sin(latitude) * math.cos(beta)
            + math.cos(azimuth) * math.sin(beta) * math.cos(latitude)
        )
        num = math.cos(beta) - math.sin(latitude) * math.sin(range_lat)
        den = math.cos(latitude) * math.cos(range_lat)

        if azi in (0, 180) and beta > (math.pi / 2.0 - latitude):
            range_long = longitude + math.pi
        elif abs(num / den) > 1.0:
            range_long = longitude
        elif azi <= 180:
            range_long = longitude - math.acos(num / den)
        else:
            range_long = longitude + math.acos(num / den)

        while range_long < 0.0:
            range_long += TWO_PI
        while range_long > TWO_PI:
            range_long -= TWO_PI

        points.append((math.degrees(range_lat), math.degrees(range_long)))

    return points
