"""
Physical and model constants for orbit propagation and pass prediction.

Values follow the WGS-72/WGS-84 mix used by the classic SGP4/SDP4
models, so results line up with other implementations of those models.
"""

import math

# =============================================================================
# GENERAL
# =============================================================================

TWO_PI = 2.0 * math.pi
PI_OVER_TWO = math.pi / 2.0
DEG2RAD = math.pi / 180.0
EPSILON = 1.0e-12
TWO_THIRDS = 2.0 / 3.0

MINUTES_PER_DAY = 1440.0
SECONDS_PER_DAY = 86400.0

SPEED_OF_LIGHT = 2.99792458e8  # m/s

# =============================================================================
# EARTH
# =============================================================================

EARTH_RADIUS_KM = 6.378137e3  # WGS-84 equatorial radius
FLATTENING_FACTOR = 3.35281066474748e-3
EARTH_ROTATIONS_PER_SIDEREAL_DAY = 1.00273790934
EARTH_ANGULAR_VELOCITY = TWO_PI * EARTH_ROTATIONS_PER_SIDEREAL_DAY / SECONDS_PER_DAY  # rad/s

# Mean radius used for footprint (range circle) latitudes
FOOTPRINT_EARTH_RADIUS_KM = 6378.16

# =============================================================================
# SGP4 / SDP4 MODEL
# =============================================================================

XKE = 7.43669161e-2  # sqrt(GM) in earth radii^1.5 / minute
CK2 = 5.413079e-4  # 0.5 * J2
CK4 = 6.209887e-7  # -0.375 * J4
J3_HARMONIC = -2.53881e-6
S_DENSITY_PARAM = 1.012229
QOMS2T = 1.880279e-09

PERIGEE_156_KM = 156.0
SIMPLE_DRAG_PERIGEE_KM = 220.0
DEEP_SPACE_PERIOD_MINUTES = 225.0

# Kepler solver
KEPLER_MAX_ITERATIONS = 10
KEPLER_TOLERANCE = 1.0e-6

# Geodetic latitude iteration
GEODETIC_MAX_ITERATIONS = 10
GEODETIC_TOLERANCE = 1.0e-10

# Eccentricity bounds for a still-valid propagated orbit
MIN_PROPAGATED_ECCENTRICITY = 1.0e-6
DECAYED_ECCENTRICITY_LIMIT = -1.0e-3
MIN_SEMI_MAJOR_AXIS_ER = 0.95

# =============================================================================
# DEEP SPACE (LUNAR / SOLAR / RESONANCE)
# =============================================================================

ZNS = 1.19459e-5
C1SS = 2.9864797e-6
ZES = 0.01675
ZNL = 1.5835218e-4
C1L = 4.7968065e-7
ZEL = 0.05490
ZCOSIS = 0.91744867
ZSINIS = 0.39785416
ZSINGS = -0.98088458
ZCOSGS = 0.1945905

Q22 = 1.7891679e-6
Q31 = 2.1460748e-6
Q33 = 2.2123015e-7
G22 = 5.7686396
G32 = 0.95240898
G44 = 1.8014998
G52 = 1.0508330
G54 = 4.4108898
ROOT22 = 1.7891679e-6
ROOT32 = 3.7393792e-7
ROOT44 = 7.3636953e-9
ROOT52 = 1.1428639e-7
ROOT54 = 2.1765803e-9
THDT = 4.3752691e-3

FASX2 = 0.13130908
FASX4 = 2.8843198
FASX6 = 0.37448087

# Lyddane correction applies below this inclination (radians)
LYDDANE_INCLINATION_LIMIT = 0.2

# Solar node term is dropped below this inclination (radians)
SOLAR_NODE_INCLINATION_LIMIT = 5.2359877e-2

# Resonance integrator (fixed step, Euler-Maclaurin)
RESONANCE_STEP_MINUTES = 720.0
RESONANCE_STEP2 = 0.5 * RESONANCE_STEP_MINUTES * RESONANCE_STEP_MINUTES
RESONANCE_MAX_STEPS = 100000

# Mean motion windows (radians/minute)
SYNCHRONOUS_MIN_MOTION = 0.0034906585
SYNCHRONOUS_MAX_MOTION = 0.0052359877
HALF_DAY_MIN_MOTION = 0.00826
HALF_DAY_MAX_MOTION = 0.00924
HALF_DAY_MIN_ECCENTRICITY = 0.5

# =============================================================================
# SUN
# =============================================================================

SOLAR_RADIUS_KM = 6.96000e5
ASTRONOMICAL_UNIT_KM = 1.49597870691e8

# =============================================================================
# TIME BASE
# =============================================================================

# Julian date of 1979-12-31 00:00 UTC, origin of the day number
DAYNUM_JULIAN_OFFSET = 2444238.5
J2000_JULIAN_DATE = 2451545.0
# Two-digit TLE years below this pivot belong to the 21st century
EPOCH_YEAR_PIVOT = 57
