"""
Deep-space orbit model (SDP4).

Adds to the near-earth secular terms:

- lunar and solar secular rates and long-period periodics,
- geopotential resonance for 12 hour (eccentric, Molniya-class) and
  24 hour (synchronous) orbits, integrated with a fixed 720 minute step
  seeded at the element epoch,
- the Lyddane modification of the periodics for low inclinations, so that
  node- and perigee-dependent terms never divide by a vanishing sin(i).

Reference: Hoots & Roehrich, Spacetrack Report No. 3 (1980), with the
node-wrap patch to the Lyddane modification suggested by Rob Matson.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

from .constants import (
    C1L,
    C1SS,
    DECAYED_ECCENTRICITY_LIMIT,
    FASX2,
    FASX4,
    FASX6,
    G22,
    G32,
    G44,
    G52,
    G54,
    HALF_DAY_MAX_MOTION,
    HALF_DAY_MIN_ECCENTRICITY,
    HALF_DAY_MIN_MOTION,
    LYDDANE_INCLINATION_LIMIT,
    MIN_PROPAGATED_ECCENTRICITY,
    MIN_SEMI_MAJOR_AXIS_ER,
    Q22,
    Q31,
    Q33,
    RESONANCE_MAX_STEPS,
    RESONANCE_STEP2,
    RESONANCE_STEP_MINUTES,
    ROOT22,
    ROOT32,
    ROOT44,
    ROOT52,
    ROOT54,
    SOLAR_NODE_INCLINATION_LIMIT,
    SYNCHRONOUS_MAX_MOTION,
    SYNCHRONOUS_MIN_MOTION,
    THDT,
    TWO_PI,
    TWO_THIRDS,
    XKE,
    ZCOSGS,
    ZCOSIS,
    ZEL,
    ZES,
    ZNL,
    ZNS,
    ZSINGS,
    ZSINIS,
)
from .elements import OrbitalElements
from .errors import PropagationError
from .near_earth import (
    OrbitalVectors,
    SecularTerms,
    orbital_phase,
    secular_terms,
    short_period_vectors,
    solve_kepler,
)
from .timebase import mod2pi, theta_g_epoch

logger = logging.getLogger(__name__)


class ResonanceKind(Enum):
    """Geopotential resonance regime of a deep-space orbit."""

    NONE = "none"
    HALF_DAY = "half_day"
    SYNCHRONOUS = "synchronous"


class PerturbationCoefficients(NamedTuple):
    """Secular rates and periodic coefficients of one perturbing body."""

    se: float
    si: float
    sl: float
    sgh: float
    sh: float
    ee2: float
    e3: float
    xi2: float
    xi3: float
    xl2: float
    xl3: float
    xl4: float
    xgh2: float
    xgh3: float
    xgh4: float
    xh2: float
    xh3: float


@dataclass(frozen=True)
class ResonanceTerms:
    kind: ResonanceKind
    xlamo: float = 0.0
    xfact: float = 0.0
    del1: float = 0.0
    del2: float = 0.0
    del3: float = 0.0
    d2201: float = 0.0
    d2211: float = 0.0
    d3210: float = 0.0
    d3222: float = 0.0
    d4410: float = 0.0
    d4422: float = 0.0
    d5220: float = 0.0
    d5232: float = 0.0
    d5421: float = 0.0
    d5433: float = 0.0


@dataclass(frozen=True)
class DeepSpaceTerms:
    """Coefficients of the deep-space model."""

    secular: SecularTerms
    thgr: float  # sidereal angle at epoch
    ds50: float  # epoch in days since 1950 Jan 0.0
    xqncl: float
    sse: float
    ssi: float
    ssl: float
    ssg: float
    ssh: float
    solar: PerturbationCoefficients
    lunar: PerturbationCoefficients
    zmos: float
    zmol: float
    resonance: ResonanceTerms


def _safe_ratio(numerator: float, sinio: float) -> float:
    # numerator is zeroed for near-equatorial orbits
    if numerator == 0.0:
        return 0.0
    return numerator / sinio


def _body_coefficients(
    sec: SecularTerms,
    elements: OrbitalElements,
    zcosg: float,
    zsing: float,
    zcosi: float,
    zsini: float,
    zcosh: float,
    zsinh: float,
    cc: float,
    zn: float,
    ze: float,
) -> PerturbationCoefficients:
    sing = math.sin(elements.omegao)
    cosg = math.cos(elements.omegao)
    eosq = sec.eosq
    eq = elements.eccentricity
    xnoi = 1.0 / sec.xnodp

    a1 = zcosg * zcosh + zsing * zcosi * zsinh
    a3 = -zsing * zcosh + zcosg * zcosi * zsinh
    a7 = -zcosg * zsinh + zsing * zcosi * zcosh
    a8 = zsing * zsini
    a9 = zsing * zsinh + zcosg * zcosi * zcosh
    a10 = zcosg * zsini
    a2 = sec.cosio * a7 + sec.sinio * a8
    a4 = sec.cosio * a9 + sec.sinio * a10
    a5 = -sec.sinio * a7 + sec.cosio * a8
    a6 = -sec.sinio * a9 + sec.cosio * a10
    x1 = a1 * cosg + a2 * sing
    x2 = a3 * cosg + a4 * sing
    x3 = -a1 * sing + a2 * cosg
    x4 = -a3 * sing + a4 * cosg
    x5 = a5 * sing
    x6 = a6 * sing
    x7 = a5 * cosg
    x8 = a6 * cosg
    z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
    z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
    z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
    z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * eosq
    z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * eosq
    z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * eosq
    z11 = -6.0 * a1 * a5 + eosq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
    z12 = -6.0 * (a1 * a6 + a3 * a5) + eosq * (
        -24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)
    )
    z13 = -6.0 * a3 * a6 + eosq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
    z21 = 6.0 * a2 * a5 + eosq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
    z22 = 6.0 * (a4 * a5 + a2 * a6) + eosq * (
        24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)
    )
    z23 = 6.0 * a4 * a6 + eosq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
    z1 = z1 + z1 + sec.betao2 * z31
    z2 = z2 + z2 + sec.betao2 * z32
    z3 = z3 + z3 + sec.betao2 * z33
    s3 = cc * xnoi
    s2 = -0.5 * s3 / sec.betao
    s4 = s3 * sec.betao
    s1 = -15.0 * eq * s4
    s5 = x1 * x3 + x2 * x4
    s6 = x2 * x3 + x1 * x4
    s7 = x2 * x4 - x1 * x3

    sh = -zn * s2 * (z21 + z23)
    if elements.xincl < SOLAR_NODE_INCLINATION_LIMIT:
        sh = 0.0

    return PerturbationCoefficients(
        se=s1 * zn * s5,
        si=s2 * zn * (z11 + z13),
        sl=-zn * s3 * (z1 + z3 - 14.0 - 6.0 * eosq),
        sgh=s4 * zn * (z31 + z33 - 6.0),
        sh=sh,
        ee2=2.0 * s1 * s6,
        e3=2.0 * s1 * s7,
        xi2=2.0 * s2 * z12,
        xi3=2.0 * s2 * (z13 - z11),
        xl2=-2.0 * s3 * z2,
        xl3=-2.0 * s3 * (z3 - z1),
        xl4=-2.0 * s3 * (-21.0 - 9.0 * eosq) * ze,
        xgh2=2.0 * s4 * z32,
        xgh3=2.0 * s4 * (z33 - z31),
        xgh4=-18.0 * s4 * ze,
        xh2=-2.0 * s2 * z22,
        xh3=-2.0 * s2 * (z23 - z21),
    )


def _half_day_resonance(
    sec: SecularTerms,
    elements: OrbitalElements,
    thgr: float,
    ssl: float,
    ssh: float,
) -> ResonanceTerms:
    eq = elements.eccentricity
    eosq = sec.eosq
    eoc = eq * eosq
    sinio = sec.sinio
    cosio = sec.cosio
    theta2 = sec.theta2
    xnq = sec.xnodp
    aqnv = 1.0 / sec.aodp

    g201 = -0.306 - (eq - 0.64) * 0.440
    if eq <= 0.65:
        g211 = 3.616 - 13.247 * eq + 16.290 * eosq
        g310 = -19.302 + 117.390 * eq - 228.419 * eosq + 156.591 * eoc
        g322 = -18.9068 + 109.7927 * eq - 214.6334 * eosq + 146.5816 * eoc
        g410 = -41.122 + 242.694 * eq - 471.094 * eosq + 313.953 * eoc
        g422 = -146.407 + 841.880 * eq - 1629.014 * eosq + 1083.435 * eoc
        g520 = -532.114 + 3017.977 * eq - 5740.0 * eosq + 3708.276 * eoc
    else:
        g211 = -72.099 + 331.819 * eq - 508.738 * eosq + 266.724 * eoc
        g310 = -346.844 + 1582.851 * eq - 2415.925 * eosq + 1246.113 * eoc
        g322 = -342.585 + 1554.908 * eq - 2366.899 * eosq + 1215.972 * eoc
        g410 = -1052.797 + 4758.686 * eq - 7193.992 * eosq + 3651.957 * eoc
        g422 = -3581.69 + 16178.11 * eq - 24462.77 * eosq + 12422.52 * eoc
        if eq <= 0.715:
            g520 = 1464.74 - 4664.75 * eq + 3763.64 * eosq
        else:
            g520 = -5149.66 + 29936.92 * eq - 54087.36 * eosq + 31324.56 * eoc

    if eq < 0.7:
        g533 = -919.2277 + 4988.61 * eq - 9064.77 * eosq + 5542.21 * eoc
        g521 = -822.71072 + 4568.6173 * eq - 8491.4146 * eosq + 5337.524 * eoc
        g532 = -853.666 + 4690.25 * eq - 8624.77 * eosq + 5341.4 * eoc
    else:
        g533 = -37995.78 + 161616.52 * eq - 229838.2 * eosq + 109377.94 * eoc
        g521 = -51752.104 + 218913.95 * eq - 309468.16 * eosq + 146349.42 * eoc
        g532 = -40023.88 + 170470.89 * eq - 242699.48 * eosq + 115605.82 * eoc

    sini2 = sinio * sinio
    f220 = 0.75 * (1.0 + 2.0 * cosio + theta2)
    f221 = 1.5 * sini2
    f321 = 1.875 * sinio * (1.0 - 2.0 * cosio - 3.0 * theta2)
    f322 = -1.875 * sinio * (1.0 + 2.0 * cosio - 3.0 * theta2)
    f441 = 35.0 * sini2 * f220
    f442 = 39.3750 * sini2 * sini2
    f522 = 9.84375 * sinio * (
        sini2 * (1.0 - 2.0 * cosio - 5.0 * theta2)
        + 0.33333333 * (-2.0 + 4.0 * cosio + 6.0 * theta2)
    )
    f523 = sinio * (
        4.92187512 * sini2 * (-2.0 - 4.0 * cosio + 10.0 * theta2)
        + 6.56250012 * (1.0 + 2.0 * cosio - 3.0 * theta2)
    )
    f542 = 29.53125 * sinio * (
        2.0 - 8.0 * cosio + theta2 * (-12.0 + 8.0 * cosio + 10.0 * theta2)
    )
    f543 = 29.53125 * sinio * (
        -2.0 - 8.0 * cosio + theta2 * (12.0 + 8.0 * cosio - 10.0 * theta2)
    )

    xno2 = xnq * xnq
    ainv2 = aqnv * aqnv
    temp1 = 3.0 * xno2 * ainv2
    temp = temp1 * ROOT22
    d2201 = temp * f220 * g201
    d2211 = temp * f221 * g211
    temp1 = temp1 * aqnv
    temp = temp1 * ROOT32
    d3210 = temp * f321 * g310
    d3222 = temp * f322 * g322
    temp1 = temp1 * aqnv
    temp = 2.0 * temp1 * ROOT44
    d4410 = temp * f441 * g410
    d4422 = temp * f442 * g422
    temp1 = temp1 * aqnv
    temp = temp1 * ROOT52
    d5220 = temp * f522 * g520
    d5232 = temp * f523 * g532
    temp = 2.0 * temp1 * ROOT54
    d5421 = temp * f542 * g521
    d5433 = temp * f543 * g533

    xlamo = elements.xmo + elements.xnodeo + elements.xnodeo - thgr - thgr
    bfact = sec.xmdot + sec.xnodot + sec.xnodot - THDT - THDT
    bfact = bfact + ssl + ssh + ssh

    return ResonanceTerms(
        kind=ResonanceKind.HALF_DAY,
        xlamo=xlamo,
        xfact=bfact - xnq,
        d2201=d2201,
        d2211=d2211,
        d3210=d3210,
        d3222=d3222,
        d4410=d4410,
        d4422=d4422,
        d5220=d5220,
        d5232=d5232,
        d5421=d5421,
        d5433=d5433,
    )


def _synchronous_resonance(
    sec: SecularTerms,
    elements: OrbitalElements,
    thgr: float,
    ssl: float,
    ssg: float,
    ssh: float,
) -> ResonanceTerms:
    eosq = sec.eosq
    cosio = sec.cosio
    sinio = sec.sinio
    xnq = sec.xnodp
    aqnv = 1.0 / sec.aodp

    g200 = 1.0 + eosq * (-2.5 + 0.8125 * eosq)
    g310 = 1.0 + 2.0 * eosq
    g300 = 1.0 + eosq * (-6.0 + 6.60937 * eosq)
    f220 = 0.75 * (1.0 + cosio) * (1.0 + cosio)
    f311 = 0.9375 * sinio * sinio * (1.0 + 3.0 * cosio) - 0.75 * (1.0 + cosio)
    f330 = 1.0 + cosio
    f330 = 1.875 * f330 * f330 * f330
    del1 = 3.0 * xnq * xnq * aqnv * aqnv
    del2 = 2.0 * del1 * f220 * g200 * Q22
    del3 = 3.0 * del1 * f330 * g300 * Q33 * aqnv
    del1 = del1 * f311 * g310 * Q31 * aqnv

    xlamo = elements.xmo + elements.xnodeo + elements.omegao - thgr
    xpidot = sec.omgdot + sec.xnodot
    bfact = sec.xmdot + xpidot - THDT
    bfact = bfact + ssl + ssg + ssh

    return ResonanceTerms(
        kind=ResonanceKind.SYNCHRONOUS,
        xlamo=xlamo,
        xfact=bfact - xnq,
        del1=del1,
        del2=del2,
        del3=del3,
    )


def resonance_kind(xnq: float, eccentricity: float) -> ResonanceKind:
    """Classify an orbit by its recovered mean motion (radians/minute)."""
    if SYNCHRONOUS_MIN_MOTION < xnq < SYNCHRONOUS_MAX_MOTION:
        return ResonanceKind.SYNCHRONOUS
    if (
        HALF_DAY_MIN_MOTION <= xnq <= HALF_DAY_MAX_MOTION
        and eccentricity >= HALF_DAY_MIN_ECCENTRICITY
    ):
        return ResonanceKind.HALF_DAY
    return ResonanceKind.NONE


def init_deep_space(elements: OrbitalElements) -> DeepSpaceTerms:
    """Build the deep-space model coefficients for an element set."""
    sec = secular_terms(elements)
    thgr, ds50 = theta_g_epoch(elements.epoch)

    sinq = math.sin(elements.xnodeo)
    cosq = math.cos(elements.xnodeo)

    # Lunar terms, days since 1900 Jan 0.5
    day = ds50 + 18261.5
    xnodce = 4.5236020 - 9.2422029e-4 * day
    stem = math.sin(xnodce)
    ctem = math.cos(xnodce)
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = math.sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = math.sqrt(1.0 - zsinhl * zsinhl)
    c = 4.7199672 + 0.22997150 * day
    gam = 5.8351514 + 0.0019443680 * day
    zmol = mod2pi(c - gam)
    zx = 0.39785416 * stem / zsinil
    zy = zcoshl * ctem + 0.91744867 * zsinhl * stem
    zx = gam + math.atan2(zx, zy) - xnodce
    zcosgl = math.cos(zx)
    zsingl = math.sin(zx)
    zmos = mod2pi(6.2565837 + 0.017201977 * day)

    solar = _body_coefficients(
        sec, elements, ZCOSGS, ZSINGS, ZCOSIS, ZSINIS, cosq, sinq, C1SS, ZNS, ZES
    )
    lunar = _body_coefficients(
        sec,
        elements,
        zcosgl,
        zsingl,
        zcosil,
        zsinil,
        zcoshl * cosq + zsinhl * sinq,
        sinq * zcoshl - cosq * zsinhl,
        C1L,
        ZNL,
        ZEL,
    )

    solar_ssh = _safe_ratio(solar.sh, sec.sinio)
    sse = solar.se + lunar.se
    ssi = solar.si + lunar.si
    ssl = solar.sl + lunar.sl
    ssg = (solar.sgh - sec.cosio * solar_ssh) + (
        lunar.sgh - sec.cosio * _safe_ratio(lunar.sh, sec.sinio)
    )
    ssh = solar_ssh + _safe_ratio(lunar.sh, sec.sinio)

    kind = resonance_kind(sec.xnodp, elements.eccentricity)
    if kind is ResonanceKind.SYNCHRONOUS:
        resonance = _synchronous_resonance(sec, elements, thgr, ssl, ssg, ssh)
    elif kind is ResonanceKind.HALF_DAY:
        resonance = _half_day_resonance(sec, elements, thgr, ssl, ssh)
    else:
        resonance = ResonanceTerms(kind=ResonanceKind.NONE)

    logger.debug(f"Deep-space terms for {elements.name}: resonance={kind.value}")

    return DeepSpaceTerms(
        secular=sec,
        thgr=thgr,
        ds50=ds50,
        xqncl=elements.xincl,
        sse=sse,
        ssi=ssi,
        ssl=ssl,
        ssg=ssg,
        ssh=ssh,
        solar=solar,
        lunar=lunar,
        zmos=zmos,
        zmol=zmol,
        resonance=resonance,
    )


class ResonanceIntegrator:
    """
    Fixed-step integrator for the resonance mean motion and longitude.

    Integration always starts at the element epoch and proceeds outward
    in whole 720 minute steps; grid points are cached by step index, so
    the result at an instant does not depend on the order of evaluations.
    """

    def __init__(self, terms: ResonanceTerms, xnq: float, omegaq: float, omgdot: float) -> None:
        self.terms = terms
        self.xnq = xnq
        self.omegaq = omegaq
        self.omgdot = omgdot
        self._grid: Dict[int, List[Tuple[float, float]]] = {
            1: [(terms.xlamo, xnq)],
            -1: [(terms.xlamo, xnq)],
        }

    def clear(self) -> None:
        for direction in self._grid:
            del self._grid[direction][1:]

    def _dot_terms(self, xli: float, xni: float, atime: float) -> Tuple[float, float, float]:
        res = self.terms
        if res.kind is ResonanceKind.SYNCHRONOUS:
            xndot = (
                res.del1 * math.sin(xli - FASX2)
                + res.del2 * math.sin(2.0 * (xli - FASX4))
                + res.del3 * math.sin(3.0 * (xli - FASX6))
            )
            xnddt = (
                res.del1 * math.cos(xli - FASX2)
                + 2.0 * res.del2 * math.cos(2.0 * (xli - FASX4))
                + 3.0 * res.del3 * math.cos(3.0 * (xli - FASX6))
            )
        else:
            xomi = self.omegaq + self.omgdot * atime
            x2omi = xomi + xomi
            x2li = xli + xli
            xndot = (
                res.d2201 * math.sin(x2omi + xli - G22)
                + res.d2211 * math.sin(xli - G22)
                + res.d3210 * math.sin(xomi + xli - G32)
                + res.d3222 * math.sin(-xomi + xli - G32)
                + res.d4410 * math.sin(x2omi + x2li - G44)
                + res.d4422 * math.sin(x2li - G44)
                + res.d5220 * math.sin(xomi + xli - G52)
                + res.d5232 * math.sin(-xomi + xli - G52)
                + res.d5421 * math.sin(xomi + x2li - G54)
                + res.d5433 * math.sin(-xomi + x2li - G54)
            )
            xnddt = (
                res.d2201 * math.cos(x2omi + xli - G22)
                + res.d2211 * math.cos(xli - G22)
                + res.d3210 * math.cos(xomi + xli - G32)
                + res.d3222 * math.cos(-xomi + xli - G32)
                + res.d5220 * math.cos(xomi + xli - G52)
                + res.d5232 * math.cos(-xomi + xli - G52)
                + 2.0
                * (
                    res.d4410 * math.cos(x2omi + x2li - G44)
                    + res.d4422 * math.cos(x2li - G44)
                    + res.d5421 * math.cos(xomi + x2li - G54)
                    + res.d5433 * math.cos(-xomi + x2li - G54)
                )
            )
        xldot = xni + res.xfact
        return xldot, xndot, xnddt * xldot

    def integrate(self, tsince: float) -> Tuple[float, float, bool]:
        """
        Resonance state at a time since epoch.

        Returns:
            Tuple of (mean motion, mean longitude, converged); converged is
            False when the step cap truncated the integration
        """
        direction = 1 if tsince >= 0 else -1
        delt = direction * RESONANCE_STEP_MINUTES
        steps = int(abs(tsince) // RESONANCE_STEP_MINUTES)
        converged = steps <= RESONANCE_MAX_STEPS
        if not converged:
            logger.warning(
                f"Resonance integration capped at {RESONANCE_MAX_STEPS} steps "
                f"for t={tsince:.1f} min"
            )
            steps = RESONANCE_MAX_STEPS

        grid = self._grid[direction]
        while len(grid) <= steps:
            atime = (len(grid) - 1) * delt
            xli, xni = grid[-1]
            xldot, xndot, xnddt = self._dot_terms(xli, xni, atime)
            grid.append(
                (
                    xli + xldot * delt + xndot * RESONANCE_STEP2,
                    xni + xndot * delt + xnddt * RESONANCE_STEP2,
                )
            )

        atime = steps * delt
        xli, xni = grid[steps]
        xldot, xndot, xnddt = self._dot_terms(xli, xni, atime)
        ft = tsince - atime
        xn = xni + xndot * ft + xnddt * ft * ft * 0.5
        xl = xli + xldot * ft + xndot * ft * ft * 0.5
        return xn, xl, converged


class DeepSecular(NamedTuple):
    xll: float
    omgadf: float
    xnode: float
    em: float
    xinc: float
    xn: float
    converged: bool


def deep_secular(
    elements: OrbitalElements,
    terms: DeepSpaceTerms,
    integrator: ResonanceIntegrator,
    xll: float,
    omgadf: float,
    xnode: float,
    tsince: float,
) -> DeepSecular:
    """Apply lunar-solar secular rates and the resonance integration."""
    xll = xll + terms.ssl * tsince
    omgadf = omgadf + terms.ssg * tsince
    xnode = xnode + terms.ssh * tsince
    em = elements.eccentricity + terms.sse * tsince
    xinc = elements.xincl + terms.ssi * tsince

    if xinc < 0.0:
        xinc = -xinc
        xnode = xnode + math.pi
        omgadf = omgadf - math.pi

    if terms.resonance.kind is ResonanceKind.NONE:
        return DeepSecular(xll, omgadf, xnode, em, xinc, terms.secular.xnodp, True)

    xn, xl, converged = integrator.integrate(tsince)
    temp = -xnode + terms.thgr + tsince * THDT
    if terms.resonance.kind is ResonanceKind.SYNCHRONOUS:
        xll = xl - omgadf + temp
    else:
        xll = xl + temp + temp
    return DeepSecular(xll, omgadf, xnode, em, xinc, xn, converged)


def _body_periodics(
    coeffs: PerturbationCoefficients, zmo: float, zn: float, ze: float, tsince: float
) -> Tuple[float, float, float, float, float]:
    zm = zmo + zn * tsince
    zf = zm + 2.0 * ze * math.sin(zm)
    sinzf = math.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * math.cos(zf)
    se = coeffs.ee2 * f2 + coeffs.e3 * f3
    si = coeffs.xi2 * f2 + coeffs.xi3 * f3
    sl = coeffs.xl2 * f2 + coeffs.xl3 * f3 + coeffs.xl4 * sinzf
    sgh = coeffs.xgh2 * f2 + coeffs.xgh3 * f3 + coeffs.xgh4 * sinzf
    sh = coeffs.xh2 * f2 + coeffs.xh3 * f3
    return se, si, sl, sgh, sh


class DeepPeriodic(NamedTuple):
    xll: float
    omgadf: float
    xnode: float
    em: float
    xinc: float


def deep_periodics(
    terms: DeepSpaceTerms,
    xll: float,
    omgadf: float,
    xnode: float,
    em: float,
    xinc: float,
    tsince: float,
) -> DeepPeriodic:
    """Apply lunar-solar periodics, with the Lyddane modification at low inclination."""
    sec = terms.secular
    sinis = math.sin(xinc)
    cosis = math.cos(xinc)

    ses, sis, sls, sghs, shs = _body_periodics(terms.solar, terms.zmos, ZNS, ZES, tsince)
    sel, sil, sll, sghl, shl = _body_periodics(terms.lunar, terms.zmol, ZNL, ZEL, tsince)
    pe = ses + sel
    pinc = sis + sil
    pl = sls + sll
    pgh = sghs + sghl
    ph = shs + shl

    xinc = xinc + pinc
    em = em + pe

    if terms.xqncl >= LYDDANE_INCLINATION_LIMIT:
        ph = ph / sec.sinio
        pgh = pgh - sec.cosio * ph
        return DeepPeriodic(xll + pl, omgadf + pgh, xnode + ph, em, xinc)

    sinok = math.sin(xnode)
    cosok = math.cos(xnode)
    alfdp = sinis * sinok + (ph * cosok + pinc * cosis * sinok)
    betdp = sinis * cosok + (-ph * sinok + pinc * cosis * cosok)
    xnode = mod2pi(xnode)
    xls = xll + omgadf + cosis * xnode
    dls = pl + pgh - pinc * xnode * sinis
    xls = xls + dls
    xnoh = xnode
    xnode = math.atan2(alfdp, betdp)

    # Keep the node on the same branch as before the correction
    if abs(xnoh - xnode) > math.pi:
        if xnode < xnoh:
            xnode += TWO_PI
        else:
            xnode -= TWO_PI

    xll = xll + pl
    omgadf = xls - xll - math.cos(xinc) * xnode
    return DeepPeriodic(xll, omgadf, xnode, em, xinc)


def propagate_deep_space(
    elements: OrbitalElements,
    terms: DeepSpaceTerms,
    integrator: ResonanceIntegrator,
    tsince: float,
) -> OrbitalVectors:
    """
    Evaluate the deep-space model.

    Args:
        elements: Element set the terms were built from
        terms: Model coefficients from init_deep_space
        integrator: Resonance integrator owned by the caller
        tsince: Minutes since the element set epoch

    Returns:
        OrbitalVectors in earth radii and earth radii per minute
    """
    sec = terms.secular

    # Update for secular gravity and atmospheric drag
    xmdf = elements.xmo + sec.xmdot * tsince
    omgadf = elements.omegao + sec.omgdot * tsince
    xnoddf = elements.xnodeo + sec.xnodot * tsince
    tsq = tsince * tsince
    xnode = xnoddf + sec.xnodcf * tsq
    tempa = 1.0 - sec.c1 * tsince
    tempe = elements.bstar * sec.c4 * tsince
    templ = sec.t2cof * tsq

    secular = deep_secular(elements, terms, integrator, xmdf, omgadf, xnode, tsince)

    a = math.pow(XKE / secular.xn, TWO_THIRDS) * tempa * tempa
    em = secular.em - tempe
    xmam = secular.xll + sec.xnodp * templ

    periodic = deep_periodics(
        terms, xmam, secular.omgadf, secular.xnode, em, secular.xinc, tsince
    )
    em = periodic.em
    if em >= 1.0 or em < DECAYED_ECCENTRICITY_LIMIT or a < MIN_SEMI_MAJOR_AXIS_ER:
        raise PropagationError(
            f"{elements.name} orbit is degenerate at {tsince:.1f} min from epoch "
            f"(a={a:.4f} er, e={em:.6f})"
        )
    em = max(em, MIN_PROPAGATED_ECCENTRICITY)

    xl = periodic.xll + periodic.omgadf + periodic.xnode
    beta = math.sqrt(1.0 - em * em)
    xn = XKE / math.pow(a, 1.5)

    # Long period periodics
    axn = em * math.cos(periodic.omgadf)
    temp = 1.0 / (a * beta * beta)
    xll = temp * sec.xlcof * axn
    aynl = temp * sec.aycof
    xlt = xl + xll
    ayn = em * math.sin(periodic.omgadf) + aynl

    kepler = solve_kepler(mod2pi(xlt - periodic.xnode), axn, ayn)
    position, velocity = short_period_vectors(
        sec, a, xn, axn, ayn, kepler, periodic.xnode, periodic.xinc
    )
    phase = orbital_phase(xlt, periodic.xnode, periodic.omgadf)
    return OrbitalVectors(position, velocity, phase, kepler.converged and secular.converged)
