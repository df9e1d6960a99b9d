"""
Satellite propagator.

Wraps the near-earth and deep-space models behind one interface. The model
is chosen once from the orbital period when the propagator is built; every
evaluation is then a pure function of the element set and the instant.
"""

import dataclasses
import logging
import warnings
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Optional, Union

from .constants import EARTH_RADIUS_KM, MINUTES_PER_DAY, SECONDS_PER_DAY
from .deep_space import (
    DeepSpaceTerms,
    ResonanceIntegrator,
    init_deep_space,
    propagate_deep_space,
)
from .elements import OrbitalElements
from .errors import NumericNonConvergenceWarning
from .geometry import eclipse, geodetic_position, look_angles, sun_vector, will_be_seen
from .ground_station import GroundStationPosition
from .near_earth import NearEarthTerms, init_near_earth, propagate_near_earth
from .state import EclipseState, InertialState, SatelliteState
from .timebase import julian_date, julian_date_of_epoch, theta_g_jd, to_utc

logger = logging.getLogger(__name__)

# Cache configuration
SIDEREAL_CACHE_SIZE = 4096  # LRU cache size for sidereal angles keyed by Julian date

# Velocity scale from earth radii per minute to km per second
VELOCITY_SCALE = EARTH_RADIUS_KM * MINUTES_PER_DAY / SECONDS_PER_DAY


class PropagationModel(Enum):
    """Orbit model selected for an element set."""

    NEAR_EARTH = "near_earth"
    DEEP_SPACE = "deep_space"

    @classmethod
    def for_elements(cls, elements: OrbitalElements) -> "PropagationModel":
        return cls.DEEP_SPACE if elements.is_deep_space else cls.NEAR_EARTH


class SatellitePropagator:
    """
    Position, ground track, look angles and eclipse state of one satellite.

    Instances are not thread-safe; use one propagator per thread.
    """

    def __init__(self, elements: OrbitalElements) -> None:
        """
        Build the model coefficients for an element set.

        Args:
            elements: Validated orbital element set
        """
        self.elements = elements
        self.model = PropagationModel.for_elements(elements)
        self.epoch_julian_date = julian_date_of_epoch(elements.epoch)

        self._terms: Union[NearEarthTerms, DeepSpaceTerms]
        self._integrator: Optional[ResonanceIntegrator] = None
        if self.model is PropagationModel.DEEP_SPACE:
            terms = init_deep_space(elements)
            self._terms = terms
            self._integrator = ResonanceIntegrator(
                terms.resonance,
                xnq=terms.secular.xnodp,
                omegaq=elements.omegao,
                omgdot=terms.secular.omgdot,
            )
        else:
            self._terms = init_near_earth(elements)

        # Bound LRU-cached sidereal angle, cleared between searches
        self._sidereal_angle = lru_cache(maxsize=SIDEREAL_CACHE_SIZE)(
            self._sidereal_angle_impl
        )

        logger.info(
            f"Initialized SatellitePropagator for {elements.name} "
            f"(model: {self.model.value}, period={elements.period_minutes:.1f} min)"
        )

    def _sidereal_angle_impl(self, jd: float) -> float:
        """Greenwich sidereal angle (implementation for LRU cache)."""
        return theta_g_jd(jd)

    def clear_cache(self) -> None:
        """Drop cached sidereal angles and resonance grid points."""
        self._sidereal_angle.cache_clear()
        if self._integrator is not None:
            self._integrator.clear()

    @property
    def is_deep_space(self) -> bool:
        return self.model is PropagationModel.DEEP_SPACE

    def minutes_since_epoch(self, when: datetime) -> float:
        return (julian_date(when) - self.epoch_julian_date) * MINUTES_PER_DAY

    def propagate(self, when: datetime) -> InertialState:
        """
        Inertial position and velocity at an instant.

        Args:
            when: UTC datetime (naive values are taken as UTC)

        Returns:
            InertialState in km and km/s

        Raises:
            PropagationError: If the orbit has decayed or become degenerate
        """
        when = to_utc(when)
        jd = julian_date(when)
        tsince = (jd - self.epoch_julian_date) * MINUTES_PER_DAY

        if self.model is PropagationModel.DEEP_SPACE:
            vectors = propagate_deep_space(self.elements, self._terms, self._integrator, tsince)
        else:
            vectors = propagate_near_earth(self.elements, self._terms, tsince)

        if not vectors.converged:
            self._report_non_convergence(when)

        return InertialState(
            time=when,
            julian_date=jd,
            tsince=tsince,
            position=vectors.position * EARTH_RADIUS_KM,
            velocity=vectors.velocity * VELOCITY_SCALE,
            phase=vectors.phase,
            converged=vectors.converged,
        )

    def _report_non_convergence(self, when: datetime) -> None:
        message = (
            f"Solver iteration cap reached for {self.elements.name} at "
            f"{when.isoformat()}; using best estimate"
        )
        logger.warning(message)
        warnings.warn(message, NumericNonConvergenceWarning, stacklevel=3)

    def _ground_track(self, inertial: InertialState) -> SatelliteState:
        theta_g = self._sidereal_angle(inertial.julian_date)
        latitude, longitude, altitude, theta = geodetic_position(inertial.position, theta_g)
        shadow = eclipse(inertial.position, sun_vector(inertial.julian_date))
        return SatelliteState(
            time=inertial.time,
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            phase=inertial.phase,
            theta=theta,
            eclipse_depth=shadow.depth,
            eclipsed=shadow.eclipsed,
            converged=inertial.converged,
        )

    def ground_track(self, when: datetime) -> SatelliteState:
        """Geodetic sub-satellite point, phase and eclipse state at an instant."""
        return self._ground_track(self.propagate(when))

    def topocentric(self, when: datetime, station: GroundStationPosition) -> SatelliteState:
        """
        Full satellite state including look angles from a ground station.

        Args:
            when: UTC datetime
            station: Observer location and optional horizon mask

        Returns:
            SatelliteState with azimuth, elevation, range and range rate set
        """
        inertial = self.propagate(when)
        state = self._ground_track(inertial)
        angles = look_angles(
            inertial.position,
            inertial.velocity,
            station,
            self._sidereal_angle(inertial.julian_date),
        )
        logger.debug(
            f"{self.elements.name} at {state.time.isoformat()}: "
            f"az={angles.azimuth:.4f} el={angles.elevation:.4f} rad"
        )
        return dataclasses.replace(
            state,
            azimuth=angles.azimuth,
            elevation=angles.elevation,
            range=angles.range,
            range_rate=angles.range_rate,
            above_horizon=angles.above_horizon,
        )

    def get_position(self, station: GroundStationPosition, when: datetime) -> SatelliteState:
        return self.topocentric(when, station)

    def eclipse_state(self, when: datetime) -> EclipseState:
        """Eclipse depth (radians, negative while sunlit) and eclipsed flag."""
        inertial = self.propagate(when)
        return eclipse(inertial.position, sun_vector(inertial.julian_date))

    def will_be_seen(self, station: GroundStationPosition) -> bool:
        return will_be_seen(self.elements, station)
