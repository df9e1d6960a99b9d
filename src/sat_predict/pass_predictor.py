"""
Pass prediction for one satellite over one ground station.

The search brackets the sign change of elevation with coarse steps and
then refines each edge with short steps:

1. Optionally wind the start back a quarter of an orbit.
2. If the satellite is already up, step forward until it sets, then skip
   three quarters of an orbit.
3. Coarse-step until it rises, back off one step and refine to AOS.
4. Coarse-step until it sets, classifying pole crossings on the way,
   back off one step and refine to LOS.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import SearchSettings
from .constants import SPEED_OF_LIGHT, TWO_PI
from .elements import OrbitalElements
from .errors import PassSearchError, SatelliteNotVisibleError
from .ground_station import GroundStationPosition
from .propagator import SatellitePropagator
from .state import SatelliteState
from .timebase import to_utc

logger = logging.getLogger(__name__)


class PolePassed(Enum):
    """Azimuth pole crossed by the antenna during a pass."""

    NONE = "none"
    NORTH = "north"
    SOUTH = "south"


@dataclass(frozen=True)
class PassRecord:
    """Rise, culmination and set of one pass."""

    start_time: datetime  # AOS
    end_time: datetime  # LOS
    tca: datetime
    pole_passed: PolePassed
    aos_azimuth: int  # degrees
    los_azimuth: int  # degrees
    max_elevation: float  # degrees

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "tca": self.tca.isoformat(),
            "pole_passed": self.pole_passed.value,
            "aos_azimuth": self.aos_azimuth,
            "los_azimuth": self.los_azimuth,
            "max_elevation": round(self.max_elevation, 2),
            "duration_minutes": round(self.duration_minutes, 2),
        }

    def __str__(self) -> str:
        start = self.start_time
        hour = start.hour % 12 or 12
        meridiem = "AM" if start.hour < 12 else "PM"
        return (
            f"Date: {start:%B} {start.day}, {start.year}\n"
            f"Start Time: {hour}:{start:%M} {meridiem}\n"
            f"Duration: {self.duration_minutes:4.1f} min.\n"
            f"AOS Azimuth: {self.aos_azimuth} deg.\n"
            f"Max Elevation: {self.max_elevation:4.1f} deg.\n"
            f"LOS Azimuth: {self.los_azimuth} deg."
        )


def azimuth_degrees(state: SatelliteState) -> int:
    """Azimuth of a state truncated to whole degrees."""
    return int((state.azimuth / TWO_PI) * 360.0)


def pole_passed(previous: SatelliteState, current: SatelliteState) -> PolePassed:
    """
    Classify the azimuth movement between two consecutive samples.

    A move of more than 180 degrees is taken the short way round, through
    north. Otherwise a move across 180 degrees crosses south.
    """
    az1 = previous.azimuth / TWO_PI * 360.0
    az2 = current.azimuth / TWO_PI * 360.0

    if abs(az2 - az1) > 180.0:
        return PolePassed.NORTH
    if min(az1, az2) < 180.0 < max(az1, az2):
        return PolePassed.SOUTH
    return PolePassed.NONE


class _PeakTracker:
    """Running maximum elevation and its time within one search."""

    def __init__(self) -> None:
        self.max_elevation = 0.0
        self.tca: Optional[datetime] = None

    def update(self, state: SatelliteState) -> None:
        if state.elevation > self.max_elevation:
            self.max_elevation = state.elevation
            self.tca = state.time


class PassPredictor:
    """
    Finds passes of a satellite over a ground station.

    Not thread-safe: each thread needs its own predictor.
    """

    def __init__(
        self,
        elements: Optional[OrbitalElements],
        station: Optional[GroundStationPosition],
        settings: Optional[SearchSettings] = None,
    ) -> None:
        """
        Initialize pass predictor.

        Args:
            elements: Orbital element set of the satellite
            station: Observer location
            settings: Search step sizes, defaults when omitted

        Raises:
            ValueError: If elements or station is missing
            SatelliteNotVisibleError: If the satellite can never rise at the station
        """
        if elements is None:
            raise ValueError("OrbitalElements has not been set")
        if station is None:
            raise ValueError("GroundStationPosition has not been set")

        self.station = station
        self.settings = settings or SearchSettings()
        self.iteration_count = 0
        self._install_elements(elements)

        logger.info(
            f"Initialized PassPredictor for {elements.name} over {station} "
            f"(coarse={self.settings.coarse_step_seconds}s, "
            f"fine={self.settings.fine_step_seconds}s)"
        )

    def _install_elements(self, elements: OrbitalElements) -> None:
        propagator = SatellitePropagator(elements)
        if not propagator.will_be_seen(self.station):
            raise SatelliteNotVisibleError(elements.name, self.station.latitude)
        self.elements = elements
        self.propagator = propagator

    def replace_elements(self, elements: OrbitalElements) -> None:
        """
        Swap in a new element set.

        The propagator is rebuilt and visibility is checked again; on failure
        the previous element set stays in use.
        """
        self._install_elements(elements)
        logger.info(f"Replaced element set for {elements.name}")

    @property
    def mean_motion(self) -> float:
        return self.elements.mean_motion

    def _wind_back_minutes(self) -> int:
        return int(-24.0 * 60.0 / self.mean_motion * self.settings.wind_back_fraction)

    def _skip_minutes(self) -> int:
        return int(24.0 * 60.0 / self.mean_motion * self.settings.skip_fraction)

    def _evaluate(self, when: datetime) -> SatelliteState:
        self.iteration_count += 1
        state = self.propagator.topocentric(when, self.station)
        if not math.isfinite(state.elevation):
            raise PassSearchError(when, state.elevation)
        return state

    def next_pass(self, start: datetime, wind_back: bool = False) -> PassRecord:
        """
        Find the next pass after a start time.

        The search steps forward until the satellite rises and has no
        iteration cap. An orbit that never changes horizon state at this
        station, such as a geostationary satellite, never returns.

        Args:
            start: UTC datetime to search from
            wind_back: Wind the start back a quarter orbit so that a pass
                already in progress is found

        Returns:
            PassRecord of the pass found

        Raises:
            PassSearchError: If a non-finite elevation is met
        """
        settings = self.settings
        coarse = timedelta(seconds=settings.coarse_step_seconds)
        fine = timedelta(seconds=settings.fine_step_seconds)
        set_step = timedelta(seconds=settings.set_step_seconds)

        instant = to_utc(start)
        if wind_back:
            instant += timedelta(minutes=self._wind_back_minutes())

        peak = _PeakTracker()
        pole = PolePassed.NONE

        state = self._evaluate(instant)
        if state.above_horizon:
            # Already up: wait for it to set and skip the far side of the orbit
            while state.above_horizon:
                instant += coarse
                state = self._evaluate(instant)
            instant += timedelta(minutes=self._skip_minutes())

        # Rise bracket
        while True:
            instant += coarse
            state = self._evaluate(instant)
            peak.update(state)
            if state.above_horizon:
                break

        instant -= coarse
        while True:
            instant += fine
            state = self._evaluate(instant)
            peak.update(state)
            if state.above_horizon:
                break
        aos = state
        previous = state

        # Set bracket
        while True:
            instant += set_step
            state = self._evaluate(instant)
            crossing = pole_passed(previous, state)
            if crossing is not PolePassed.NONE:
                pole = crossing
            peak.update(state)
            previous = state
            if not state.above_horizon:
                break

        instant -= set_step
        while True:
            instant += fine
            state = self._evaluate(instant)
            peak.update(state)
            if not state.above_horizon:
                break
        los = state

        record = PassRecord(
            start_time=aos.time,
            end_time=los.time,
            tca=peak.tca or aos.time,
            pole_passed=pole,
            aos_azimuth=azimuth_degrees(aos),
            los_azimuth=azimuth_degrees(los),
            max_elevation=(peak.max_elevation / TWO_PI) * 360.0,
        )
        logger.debug(
            f"Pass {record.start_time.isoformat()} - {record.end_time.isoformat()} "
            f"max el {record.max_elevation:.1f} deg, pole {record.pole_passed.value}"
        )
        return record

    def get_passes(
        self, start: datetime, hours_ahead: float, wind_back: bool = False
    ) -> List[PassRecord]:
        """
        Find consecutive passes over a time window.

        Passes are collected until one starts at or after
        ``start + hours_ahead``; that last pass is included.

        Args:
            start: UTC datetime to search from
            hours_ahead: Length of the window in hours
            wind_back: Wind back a quarter orbit before the first search only

        Returns:
            List of PassRecord in time order
        """
        self.iteration_count = 0
        self.propagator.clear_cache()

        start = to_utc(start)
        track_end = start + timedelta(hours=hours_ahead)
        track_start = start
        passes: List[PassRecord] = []

        while True:
            record = self.next_pass(track_start, wind_back=wind_back and not passes)
            passes.append(record)
            track_start = record.end_time + timedelta(minutes=self._skip_minutes())
            if record.start_time >= track_end:
                break

        logger.info(
            f"Found {len(passes)} passes of {self.elements.name} in {hours_ahead} h "
            f"({self.iteration_count} evaluations)"
        )
        return passes

    def get_positions(
        self,
        reference: datetime,
        increment_seconds: int,
        minutes_before: int,
        minutes_after: int,
    ) -> List[SatelliteState]:
        """
        Sample the satellite track around a reference time.

        Returns:
            States from ``reference - minutes_before`` up to, but excluding,
            ``reference + minutes_after``
        """
        reference = to_utc(reference)
        track_date = reference - timedelta(minutes=minutes_before)
        end_date = reference + timedelta(minutes=minutes_after)
        step = timedelta(seconds=increment_seconds)

        positions = []
        while track_date < end_date:
            positions.append(self._evaluate(track_date))
            track_date += step
        return positions

    def downlink_frequency(self, frequency_hz: int, when: datetime) -> int:
        """Downlink frequency corrected for Doppler shift at an instant."""
        range_rate = self._evaluate(when).range_rate
        return int(frequency_hz * (SPEED_OF_LIGHT - range_rate * 1000.0) / SPEED_OF_LIGHT)

    def uplink_frequency(self, frequency_hz: int, when: datetime) -> int:
        """Uplink frequency corrected for Doppler shift at an instant."""
        range_rate = self._evaluate(when).range_rate
        return int(frequency_hz * (SPEED_OF_LIGHT + range_rate * 1000.0) / SPEED_OF_LIGHT)
