"""
Observer, geodetic, solar and eclipse geometry.

All functions are pure: they take inertial vectors in km and km/s and the
Greenwich sidereal angle for the instant, and return fresh values.
"""

import logging
import math
from typing import Tuple

import numpy as np

from .constants import (
    ASTRONOMICAL_UNIT_KM,
    DEG2RAD,
    EARTH_ANGULAR_VELOCITY,
    EARTH_RADIUS_KM,
    EPSILON,
    FLATTENING_FACTOR,
    GEODETIC_MAX_ITERATIONS,
    GEODETIC_TOLERANCE,
    PI_OVER_TWO,
    SECONDS_PER_DAY,
    SOLAR_RADIUS_KM,
    TWO_PI,
)
from .elements import OrbitalElements
from .ground_station import GroundStationPosition
from .state import EclipseState, LookAngles
from .timebase import mod2pi, modulus

logger = logging.getLogger(__name__)


def observer_vectors(
    station: GroundStationPosition, theta_g: float
) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Inertial position and velocity of a ground station.

    Args:
        station: Observer location
        theta_g: Greenwich sidereal angle in radians

    Returns:
        Tuple of (position km, velocity km/s, local sidereal angle radians)
    """
    lat = station.latitude * DEG2RAD
    theta = mod2pi(theta_g + station.longitude * DEG2RAD)
    sin_lat = math.sin(lat)
    c = 1.0 / math.sqrt(1.0 + FLATTENING_FACTOR * (FLATTENING_FACTOR - 2.0) * sin_lat * sin_lat)
    sq = (1.0 - FLATTENING_FACTOR) * (1.0 - FLATTENING_FACTOR) * c
    height_km = station.height_amsl / 1000.0
    achcp = (EARTH_RADIUS_KM * c + height_km) * math.cos(lat)

    position = np.array(
        [
            achcp * math.cos(theta),
            achcp * math.sin(theta),
            (EARTH_RADIUS_KM * sq + height_km) * sin_lat,
        ]
    )
    velocity = np.array(
        [-EARTH_ANGULAR_VELOCITY * position[1], EARTH_ANGULAR_VELOCITY * position[0], 0.0]
    )
    return position, velocity, theta


def look_angles(
    position: np.ndarray,
    velocity: np.ndarray,
    station: GroundStationPosition,
    theta_g: float,
) -> LookAngles:
    """
    Azimuth, elevation, range and range rate of a satellite from a station.

    The satellite is above the horizon when its elevation in degrees exceeds
    the station's mask entry for the azimuth sector, or 0 degrees when the
    station has no mask.
    """
    obs_pos, obs_vel, theta = observer_vectors(station, theta_g)
    rng = position - obs_pos
    rgvel = velocity - obs_vel
    range_km = float(np.linalg.norm(rng))

    lat = station.latitude * DEG2RAD
    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    sin_theta = math.sin(theta)
    cos_theta = math.cos(theta)

    top_s = sin_lat * cos_theta * rng[0] + sin_lat * sin_theta * rng[1] - cos_lat * rng[2]
    top_e = -sin_theta * rng[0] + cos_theta * rng[1]
    top_z = cos_lat * cos_theta * rng[0] + cos_lat * sin_theta * rng[1] + sin_lat * rng[2]

    azimuth = math.atan2(top_e, -top_s)
    if azimuth < 0.0:
        azimuth += TWO_PI
    elevation = math.asin(top_z / range_km)
    range_rate = float(np.dot(rng, rgvel)) / range_km

    elevation_deg = elevation / TWO_PI * 360.0
    above_horizon = (elevation_deg - station.horizon_elevation(azimuth)) > EPSILON

    return LookAngles(azimuth, elevation, range_km, range_rate, above_horizon)


def geodetic_position(position: np.ndarray, theta_g: float) -> Tuple[float, float, float, float]:
    """
    Geodetic latitude, longitude and altitude of an inertial position.

    Returns:
        Tuple of (latitude radians, longitude radians 0..2pi,
        altitude km, inertial right ascension theta radians)
    """
    x, y, z = float(position[0]), float(position[1]), float(position[2])
    theta = math.atan2(y, x)
    longitude = mod2pi(theta - theta_g)
    r = math.sqrt(x * x + y * y)
    e2 = FLATTENING_FACTOR * (2.0 - FLATTENING_FACTOR)

    latitude = math.atan2(z, r)
    c = 1.0
    for _ in range(GEODETIC_MAX_ITERATIONS):
        phi = latitude
        sin_phi = math.sin(phi)
        c = 1.0 / math.sqrt(1.0 - e2 * sin_phi * sin_phi)
        latitude = math.atan2(z + EARTH_RADIUS_KM * c * e2 * sin_phi, r)
        if abs(latitude - phi) < GEODETIC_TOLERANCE:
            break

    altitude = r / math.cos(latitude) - EARTH_RADIUS_KM * c
    if latitude > PI_OVER_TWO:
        latitude -= TWO_PI
    return latitude, longitude, altitude, theta


def _delta_et(year: float) -> float:
    """Difference between ephemeris time and UTC, seconds."""
    return (
        26.465
        + 0.747622 * (year - 1950.0)
        + 1.886913 * math.sin(TWO_PI * (year - 1975.0) / 33.0)
    )


def sun_vector(jd: float) -> np.ndarray:
    """
    Low-precision inertial position of the Sun (km) at a Julian date.

    Reference: Astronomical Algorithms for the Sun, as used by the
    NORAD SGP4/SDP4 support routines.
    """
    mjd = jd - 2415020.0
    year = 1900.0 + mjd / 365.25
    t = (mjd + _delta_et(year) / SECONDS_PER_DAY) / 36525.0

    m = math.radians(
        modulus(
            358.47583 + modulus(35999.04975 * t, 360.0) - (0.000150 + 0.0000033 * t) * t * t,
            360.0,
        )
    )
    l_mean = math.radians(
        modulus(279.69668 + modulus(36000.76892 * t, 360.0) + 0.0003025 * t * t, 360.0)
    )
    e = 0.01675104 - (0.0000418 + 0.000000126 * t) * t
    c = math.radians(
        (1.919460 - (0.004789 + 0.000014 * t) * t) * math.sin(m)
        + (0.020094 - 0.000100 * t) * math.sin(2.0 * m)
        + 0.000293 * math.sin(3.0 * m)
    )
    o = math.radians(modulus(259.18 - 1934.142 * t, 360.0))
    lsa = modulus(l_mean + c - math.radians(0.00569 - 0.00479 * math.sin(o)), TWO_PI)
    nu = modulus(m + c, TWO_PI)
    r = 1.0000002 * (1.0 - e * e) / (1.0 + e * math.cos(nu))
    eps = math.radians(
        23.452294
        - (0.0130125 + (0.00000164 - 0.000000503 * t) * t) * t
        + 0.00256 * math.cos(o)
    )
    r = ASTRONOMICAL_UNIT_KM * r

    return np.array(
        [r * math.cos(lsa), r * math.sin(lsa) * math.cos(eps), r * math.sin(lsa) * math.sin(eps)]
    )


def _angle_between(a: np.ndarray, b: np.ndarray) -> float:
    cos_angle = float(np.dot(a, b)) / (float(np.linalg.norm(a)) * float(np.linalg.norm(b)))
    return math.acos(max(-1.0, min(1.0, cos_angle)))


def eclipse(position: np.ndarray, sun: np.ndarray) -> EclipseState:
    """
    Eclipse depth of a satellite in the Earth's shadow.

    Args:
        position: Satellite inertial position, km
        sun: Sun inertial position, km

    Returns:
        EclipseState; depth is negative while sunlit, the satellite is
        eclipsed when depth is non-negative and the Earth's disc is larger
        than the Sun's as seen from the satellite
    """
    radius = float(np.linalg.norm(position))
    sd_earth = math.asin(EARTH_RADIUS_KM / radius)
    rho = sun - position
    sd_sun = math.asin(SOLAR_RADIUS_KM / float(np.linalg.norm(rho)))
    delta = _angle_between(sun, -position)
    depth = sd_earth - sd_sun - delta

    if sd_earth < sd_sun:
        return EclipseState(depth, False)
    return EclipseState(depth, depth >= 0.0)


def will_be_seen(elements: OrbitalElements, station: GroundStationPosition) -> bool:
    """
    Whether the orbit can ever rise above the horizon at the station's latitude.

    Compares the largest latitude reachable by the satellite's footprint at
    apogee with the observer's latitude.
    """
    if elements.mean_motion < 1.0e-8:
        return False

    inclination = elements.inclination
    if inclination >= 90.0:
        inclination = 180.0 - inclination

    sma = 331.25 * math.exp(math.log(1440.0 / elements.mean_motion) * (2.0 / 3.0))
    apogee = sma * (1.0 + elements.eccentricity) - EARTH_RADIUS_KM
    reach = math.acos(EARTH_RADIUS_KM / (apogee + EARTH_RADIUS_KM)) + inclination * DEG2RAD

    visible = reach > abs(station.latitude * DEG2RAD)
    logger.debug(
        f"{elements.name} reach {math.degrees(reach):.2f} deg vs station "
        f"latitude {station.latitude:.4f} deg: visible={visible}"
    )
    return visible
