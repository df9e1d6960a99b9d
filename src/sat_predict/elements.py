"""
Orbital element set definitions.

An element set is the structured, already-parsed description of an orbit
at a reference epoch. Text parsing of two-line element sets happens
elsewhere; this module only validates and derives the values the
propagator needs.
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from .constants import (
    CK2,
    DEEP_SPACE_PERIOD_MINUTES,
    DEG2RAD,
    MINUTES_PER_DAY,
    TWO_PI,
    TWO_THIRDS,
    XKE,
)
from .errors import InvalidOrbitalElementsError
from .timebase import full_year

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitalElements:
    """
    Mean orbital elements at a reference epoch.

    Angles are given in degrees and exposed to the propagator in radians
    through the derived properties. Instances are immutable; the epoch is
    the only time origin used for propagation.
    """

    name: str
    catalog_number: int
    epoch_year: int  # two- or four-digit year
    epoch_day: float  # fractional day of year, 1.0 = 1 Jan 00:00 UTC
    inclination: float  # degrees
    raan: float  # degrees
    eccentricity: float
    arg_perigee: float  # degrees
    mean_anomaly: float  # degrees
    mean_motion: float  # revolutions per day
    mean_motion_dot: float = 0.0  # first derivative / 2, rev/day^2
    mean_motion_ddot: float = 0.0  # second derivative / 6, rev/day^3
    bstar: float = 0.0  # drag term, 1/earth radii
    orbit_number: int = 0
    element_set_number: int = 0

    def __post_init__(self) -> None:
        """Validate element values after initialization."""
        self._validate_finite()
        if not 0.0 <= self.eccentricity < 1.0:
            raise InvalidOrbitalElementsError(
                "eccentricity", self.eccentricity, "must lie in [0, 1)"
            )
        if self.mean_motion <= 0.0:
            raise InvalidOrbitalElementsError(
                "mean_motion", self.mean_motion, "must be positive"
            )
        if not 0.0 <= self.inclination <= 180.0:
            raise InvalidOrbitalElementsError(
                "inclination", self.inclination, "must lie in [0, 180] degrees"
            )
        if not 0.0 < self.epoch_day < 367.0:
            raise InvalidOrbitalElementsError(
                "epoch_day", self.epoch_day, "must lie in (0, 367)"
            )

    def _validate_finite(self) -> None:
        for field_name in (
            "epoch_day",
            "inclination",
            "raan",
            "eccentricity",
            "arg_perigee",
            "mean_anomaly",
            "mean_motion",
            "mean_motion_dot",
            "mean_motion_ddot",
            "bstar",
        ):
            value = getattr(self, field_name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidOrbitalElementsError(field_name, value, "must be a finite number")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrbitalElements":
        """
        Create an element set from a mapping of field names to values.

        Raises:
            InvalidOrbitalElementsError: If a field is missing or unknown
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise InvalidOrbitalElementsError(
                "fields", sorted(unknown), "unknown element set fields"
            )
        try:
            return cls(**data)
        except TypeError as e:
            raise InvalidOrbitalElementsError("fields", sorted(data), str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ------------------------------------------------------------------
    # Derived values in propagator units
    # ------------------------------------------------------------------

    @property
    def epoch(self) -> float:
        """Packed epoch: two-digit year times 1000 plus day of year."""
        return (full_year(self.epoch_year) % 100) * 1000.0 + self.epoch_day

    @property
    def xincl(self) -> float:
        return self.inclination * DEG2RAD

    @property
    def xnodeo(self) -> float:
        return self.raan * DEG2RAD

    @property
    def omegao(self) -> float:
        return self.arg_perigee * DEG2RAD

    @property
    def xmo(self) -> float:
        return self.mean_anomaly * DEG2RAD

    @property
    def xno(self) -> float:
        """Mean motion in radians per minute."""
        return self.mean_motion * TWO_PI / MINUTES_PER_DAY

    @property
    def xndt2o(self) -> float:
        return self.mean_motion_dot * TWO_PI / (MINUTES_PER_DAY * MINUTES_PER_DAY)

    @property
    def xndd6o(self) -> float:
        return self.mean_motion_ddot * TWO_PI / MINUTES_PER_DAY ** 3

    def recover_orbit(self) -> Tuple[float, float]:
        """
        Recover the un-Kozai'd mean motion and semi-major axis.

        Returns:
            Tuple of (xnodp radians/minute, aodp earth radii)
        """
        a1 = math.pow(XKE / self.xno, TWO_THIRDS)
        cosio = math.cos(self.xincl)
        x3thm1 = 3.0 * cosio * cosio - 1.0
        betao2 = 1.0 - self.eccentricity * self.eccentricity
        betao = math.sqrt(betao2)
        del1 = 1.5 * CK2 * x3thm1 / (a1 * a1 * betao * betao2)
        ao = a1 * (1.0 - del1 * (0.5 * TWO_THIRDS + del1 * (1.0 + 134.0 / 81.0 * del1)))
        delo = 1.5 * CK2 * x3thm1 / (ao * ao * betao * betao2)
        return self.xno / (1.0 + delo), ao / (1.0 - delo)

    @property
    def recovered_mean_motion(self) -> float:
        """Original (un-Kozai'd) mean motion in radians per minute."""
        return self.recover_orbit()[0]

    @property
    def period_minutes(self) -> float:
        return TWO_PI / self.recovered_mean_motion

    @property
    def is_deep_space(self) -> bool:
        """True when the orbital period is 225 minutes or longer."""
        return self.period_minutes >= DEEP_SPACE_PERIOD_MINUTES

    def __str__(self) -> str:
        return self.name
