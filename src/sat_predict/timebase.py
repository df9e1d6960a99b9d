"""
Time base conversions used by the propagator.

All internal arithmetic is done on fractional days: the day number counts
days since 1979-12-31 00:00 UTC and Julian dates are derived from it.
"""

import math
from datetime import datetime, timezone

from .constants import (
    DAYNUM_JULIAN_OFFSET,
    EARTH_ROTATIONS_PER_SIDEREAL_DAY,
    EPOCH_YEAR_PIVOT,
    J2000_JULIAN_DATE,
    SECONDS_PER_DAY,
    TWO_PI,
)

DAYNUM_ORIGIN = datetime(1979, 12, 31, 0, 0, 0)


def to_utc(when: datetime) -> datetime:
    """
    Normalise a datetime to naive UTC.

    Naive datetimes are taken to be UTC already; aware ones are converted.
    """
    if when.tzinfo is not None:
        return when.astimezone(timezone.utc).replace(tzinfo=None)
    return when


def calc_daynum(when: datetime) -> float:
    """
    Days (fractional) since 1979-12-31 00:00 UTC.

    Args:
        when: Instant to convert

    Returns:
        Day number as a float
    """
    delta = to_utc(when) - DAYNUM_ORIGIN
    return delta.total_seconds() / SECONDS_PER_DAY


def julian_date(when: datetime) -> float:
    """Julian date of an instant."""
    return calc_daynum(when) + DAYNUM_JULIAN_OFFSET


def frac(value: float) -> float:
    return value - math.floor(value)


def modulus(value: float, divisor: float) -> float:
    """Remainder with a non-negative result, truncating the quotient toward zero."""
    result = value - int(value / divisor) * divisor
    if result < 0.0:
        result += divisor
    return result


def mod2pi(value: float) -> float:
    return modulus(value, TWO_PI)


def full_year(year: int) -> int:
    """Expand a two-digit element set year (valid 1957 through 2056)."""
    if year >= 100:
        return year
    if year < EPOCH_YEAR_PIVOT:
        return year + 2000
    return year + 1900


def julian_date_of_year(year: float) -> float:
    """
    Julian date of 0.0 January of the given year.

    Reference: Astronomical Formulae for Calculators, Jean Meeus.
    """
    a_year = year - 1
    a = math.floor(a_year / 100)
    b = 2 - a + math.floor(a / 4)
    days = math.floor(365.25 * a_year) + int(30.6001 * 14)
    return days + 1720994.5 + b


def julian_date_of_epoch(epoch: float) -> float:
    """
    Julian date of a packed ``yyddd.dddddddd`` element set epoch.

    Args:
        epoch: Two-digit year times 1000 plus the fractional day of year

    Returns:
        Julian date
    """
    year = math.floor(epoch * 1.0e-3)
    day = (epoch * 1.0e-3 - year) * 1000.0
    return julian_date_of_year(full_year(int(year))) + day


def theta_g_jd(jd: float) -> float:
    """
    Greenwich mean sidereal angle (radians) at a Julian date.

    Reference: The 1992 Astronomical Almanac, page B6.
    """
    ut = frac(jd + 0.5)
    a_jd = jd - ut
    tu = (a_jd - J2000_JULIAN_DATE) / 36525.0
    gmst = 24110.54841 + tu * (8640184.812866 + tu * (0.093104 - tu * 6.2e-6))
    gmst = modulus(
        gmst + SECONDS_PER_DAY * EARTH_ROTATIONS_PER_SIDEREAL_DAY * ut, SECONDS_PER_DAY
    )
    return TWO_PI * gmst / SECONDS_PER_DAY


def theta_g_epoch(epoch: float):
    """
    Sidereal angle at a packed element set epoch, as used by the deep-space model.

    Returns:
        Tuple of (theta_g radians, days since 1950 Jan 0.0 UTC)
    """
    year = math.floor(epoch * 1.0e-3)
    day = (epoch * 1.0e-3 - year) * 1.0e3
    ut = frac(day)
    day = math.floor(day)
    jd = julian_date_of_year(full_year(int(year))) + day
    ds50 = jd - 2433281.5 + ut
    return mod2pi(6.3003880987 * ds50 + 1.72944494), ds50
