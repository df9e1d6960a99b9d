"""
Near-earth orbit model (SGP4).

Secular effects of Earth oblateness and atmospheric drag, long- and
short-period gravity periodics and the Kepler solution. The secular
initialisation, Kepler solver and short-period update are shared with
the deep-space model.

Reference: Hoots & Roehrich, Spacetrack Report No. 3 (1980), as carried
into the PREDICT tracking program.
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np

from .constants import (
    CK2,
    CK4,
    DECAYED_ECCENTRICITY_LIMIT,
    EARTH_RADIUS_KM,
    J3_HARMONIC,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE,
    MIN_PROPAGATED_ECCENTRICITY,
    MIN_SEMI_MAJOR_AXIS_ER,
    PERIGEE_156_KM,
    QOMS2T,
    S_DENSITY_PARAM,
    SIMPLE_DRAG_PERIGEE_KM,
    TWO_PI,
    TWO_THIRDS,
    XKE,
)
from .elements import OrbitalElements
from .errors import PropagationError
from .timebase import mod2pi

logger = logging.getLogger(__name__)

# Small-quantity guards for near-circular and retrograde-equatorial orbits
SMALL_ECCENTRICITY = 1.0e-4
MIN_ONE_PLUS_COSIO = 1.5e-12


class OrbitalVectors(NamedTuple):
    """Model output in earth radii and earth radii per minute."""

    position: np.ndarray
    velocity: np.ndarray
    phase: float
    converged: bool


class KeplerSolution(NamedTuple):
    sinepw: float
    cosepw: float
    ecose: float
    esine: float
    converged: bool


@dataclass(frozen=True)
class SecularTerms:
    """Secular gravity and drag coefficients shared by both models."""

    aodp: float
    xnodp: float
    perigee: float  # km above the surface
    s4: float
    qoms24: float
    cosio: float
    sinio: float
    theta2: float
    x3thm1: float
    x1mth2: float
    x7thm1: float
    eosq: float
    betao: float
    betao2: float
    tsi: float
    eta: float
    coef: float
    coef1: float
    a3ovk2: float
    c1: float
    c4: float
    xmdot: float
    omgdot: float
    xnodot: float
    xnodcf: float
    t2cof: float
    xlcof: float
    aycof: float


def density_parameters(perigee: float) -> Tuple[float, float]:
    """
    Atmospheric density parameters, altered for perigees below 156 km.

    Returns:
        Tuple of (s4, qoms24)
    """
    if perigee >= PERIGEE_156_KM:
        return S_DENSITY_PARAM, QOMS2T
    s4 = 20.0 if perigee <= 98.0 else perigee - 78.0
    qoms24 = math.pow((120.0 - s4) / EARTH_RADIUS_KM, 4)
    return s4 / EARTH_RADIUS_KM + 1.0, qoms24


def secular_terms(elements: OrbitalElements) -> SecularTerms:
    """Initialise the secular coefficients common to SGP4 and SDP4."""
    eo = elements.eccentricity
    xnodp, aodp = elements.recover_orbit()

    cosio = math.cos(elements.xincl)
    sinio = math.sin(elements.xincl)
    theta2 = cosio * cosio
    x3thm1 = 3.0 * theta2 - 1.0
    x1mth2 = 1.0 - theta2
    eosq = eo * eo
    betao2 = 1.0 - eosq
    betao = math.sqrt(betao2)

    perigee = (aodp * (1.0 - eo) - 1.0) * EARTH_RADIUS_KM
    s4, qoms24 = density_parameters(perigee)

    pinvsq = 1.0 / (aodp * aodp * betao2 * betao2)
    tsi = 1.0 / (aodp - s4)
    eta = aodp * eo * tsi
    etasq = eta * eta
    eeta = eo * eta
    psisq = abs(1.0 - etasq)
    coef = qoms24 * math.pow(tsi, 4)
    coef1 = coef / math.pow(psisq, 3.5)
    c2 = coef1 * xnodp * (
        aodp * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.75 * CK2 * tsi / psisq * x3thm1 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    c1 = elements.bstar * c2
    a3ovk2 = -J3_HARMONIC / CK2
    c4 = (
        2.0 * xnodp * coef1 * aodp * betao2
        * (
            eta * (2.0 + 0.5 * etasq)
            + eo * (0.5 + 2.0 * etasq)
            - 2.0 * CK2 * tsi / (aodp * psisq)
            * (
                -3.0 * x3thm1 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq))
                * math.cos(2.0 * elements.omegao)
            )
        )
    )

    theta4 = theta2 * theta2
    temp1 = 3.0 * CK2 * pinvsq * xnodp
    temp2 = temp1 * CK2 * pinvsq
    temp3 = 1.25 * CK4 * pinvsq * pinvsq * xnodp
    xmdot = (
        xnodp
        + 0.5 * temp1 * betao * x3thm1
        + 0.0625 * temp2 * betao * (13.0 - 78.0 * theta2 + 137.0 * theta4)
    )
    x1m5th = 1.0 - 5.0 * theta2
    omgdot = (
        -0.5 * temp1 * x1m5th
        + 0.0625 * temp2 * (7.0 - 114.0 * theta2 + 395.0 * theta4)
        + temp3 * (3.0 - 36.0 * theta2 + 49.0 * theta4)
    )
    xhdot1 = -temp1 * cosio
    xnodot = xhdot1 + (
        0.5 * temp2 * (4.0 - 19.0 * theta2) + 2.0 * temp3 * (3.0 - 7.0 * theta2)
    ) * cosio

    one_plus_cosio = 1.0 + cosio
    if abs(one_plus_cosio) < MIN_ONE_PLUS_COSIO:
        one_plus_cosio = MIN_ONE_PLUS_COSIO

    return SecularTerms(
        aodp=aodp,
        xnodp=xnodp,
        perigee=perigee,
        s4=s4,
        qoms24=qoms24,
        cosio=cosio,
        sinio=sinio,
        theta2=theta2,
        x3thm1=x3thm1,
        x1mth2=x1mth2,
        x7thm1=7.0 * theta2 - 1.0,
        eosq=eosq,
        betao=betao,
        betao2=betao2,
        tsi=tsi,
        eta=eta,
        coef=coef,
        coef1=coef1,
        a3ovk2=a3ovk2,
        c1=c1,
        c4=c4,
        xmdot=xmdot,
        omgdot=omgdot,
        xnodot=xnodot,
        xnodcf=3.5 * betao2 * xhdot1 * c1,
        t2cof=1.5 * c1,
        xlcof=0.125 * a3ovk2 * sinio * (3.0 + 5.0 * cosio) / one_plus_cosio,
        aycof=0.25 * a3ovk2 * sinio,
    )


@dataclass(frozen=True)
class NearEarthTerms:
    """
    Coefficients of the near-earth model.

    ``simple`` is set for perigees below 220 km; the drag equations are
    then truncated to linear variation in sqrt(a) and quadratic variation
    in mean anomaly, and the c3, delta omega and delta m terms are dropped.
    """

    secular: SecularTerms
    simple: bool
    c5: float
    omgcof: float
    xmcof: float
    delmo: float
    sinmo: float
    d2: float = 0.0
    d3: float = 0.0
    d4: float = 0.0
    t3cof: float = 0.0
    t4cof: float = 0.0
    t5cof: float = 0.0


def init_near_earth(elements: OrbitalElements) -> NearEarthTerms:
    """Build the near-earth model coefficients for an element set."""
    sec = secular_terms(elements)
    eo = elements.eccentricity
    bstar = elements.bstar

    simple = sec.aodp * (1.0 - eo) < (SIMPLE_DRAG_PERIGEE_KM / EARTH_RADIUS_KM + 1.0)
    if simple:
        logger.info(
            f"Perigee {sec.perigee:.1f} km below {SIMPLE_DRAG_PERIGEE_KM:.0f} km, "
            f"using simplified drag model for {elements.name}"
        )

    etasq = sec.eta * sec.eta
    eeta = eo * sec.eta
    if eo > SMALL_ECCENTRICITY:
        c3 = sec.coef * sec.tsi * sec.a3ovk2 * sec.xnodp * sec.sinio / eo
        xmcof = -TWO_THIRDS * sec.coef * bstar / eeta
    else:
        c3 = 0.0
        xmcof = 0.0
    c5 = 2.0 * sec.coef1 * sec.aodp * sec.betao2 * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    extra = {}
    if not simple:
        c1 = sec.c1
        c1sq = c1 * c1
        d2 = 4.0 * sec.aodp * sec.tsi * c1sq
        temp = d2 * sec.tsi * c1 / 3.0
        d3 = (17.0 * sec.aodp + sec.s4) * temp
        d4 = 0.5 * temp * sec.aodp * sec.tsi * (221.0 * sec.aodp + 31.0 * sec.s4) * c1
        extra = {
            "d2": d2,
            "d3": d3,
            "d4": d4,
            "t3cof": d2 + 2.0 * c1sq,
            "t4cof": 0.25 * (3.0 * d3 + c1 * (12.0 * d2 + 10.0 * c1sq)),
            "t5cof": 0.2 * (3.0 * d4 + 12.0 * c1 * d3 + 6.0 * d2 * d2 + 15.0 * c1sq * (2.0 * d2 + c1sq)),
        }

    return NearEarthTerms(
        secular=sec,
        simple=simple,
        c5=c5,
        omgcof=bstar * c3 * math.cos(elements.omegao),
        xmcof=xmcof,
        delmo=math.pow(1.0 + sec.eta * math.cos(elements.xmo), 3),
        sinmo=math.sin(elements.xmo),
        **extra,
    )


def solve_kepler(capu: float, axn: float, ayn: float) -> KeplerSolution:
    """
    Solve Kepler's equation for the eccentric longitude by Newton iteration.

    The iteration stops after KEPLER_MAX_ITERATIONS; the last iterate is
    used when the tolerance was not reached.
    """
    epw = capu
    converged = False
    for _ in range(KEPLER_MAX_ITERATIONS):
        sinepw = math.sin(epw)
        cosepw = math.cos(epw)
        step = (capu - ayn * cosepw + axn * sinepw - epw) / (
            1.0 - axn * cosepw - ayn * sinepw
        )
        if abs(step) <= KEPLER_TOLERANCE:
            converged = True
            break
        epw += step

    if not converged:
        sinepw = math.sin(epw)
        cosepw = math.cos(epw)

    return KeplerSolution(
        sinepw=sinepw,
        cosepw=cosepw,
        ecose=axn * cosepw + ayn * sinepw,
        esine=axn * sinepw - ayn * cosepw,
        converged=converged,
    )


def short_period_vectors(
    sec: SecularTerms,
    a: float,
    xn: float,
    axn: float,
    ayn: float,
    kepler: KeplerSolution,
    xnode: float,
    xinc: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Apply short-period periodics and build position and velocity vectors.

    Returns:
        Tuple of (position earth radii, velocity earth radii/minute)
    """
    elsq = axn * axn + ayn * ayn
    temp = 1.0 - elsq
    pl = a * temp
    r = a * (1.0 - kepler.ecose)
    temp1 = 1.0 / r
    rdot = XKE * math.sqrt(a) * kepler.esine * temp1
    rfdot = XKE * math.sqrt(pl) * temp1
    temp2 = a * temp1
    betal = math.sqrt(temp)
    temp3 = 1.0 / (1.0 + betal)
    cosu = temp2 * (kepler.cosepw - axn + ayn * kepler.esine * temp3)
    sinu = temp2 * (kepler.sinepw - ayn - axn * kepler.esine * temp3)
    u = math.atan2(sinu, cosu)
    sin2u = 2.0 * sinu * cosu
    cos2u = 2.0 * cosu * cosu - 1.0
    temp = 1.0 / pl
    temp1 = CK2 * temp
    temp2 = temp1 * temp

    rk = r * (1.0 - 1.5 * temp2 * betal * sec.x3thm1) + 0.5 * temp1 * sec.x1mth2 * cos2u
    uk = u - 0.25 * temp2 * sec.x7thm1 * sin2u
    xnodek = xnode + 1.5 * temp2 * sec.cosio * sin2u
    xinck = xinc + 1.5 * temp2 * sec.cosio * sec.sinio * cos2u
    rdotk = rdot - xn * temp1 * sec.x1mth2 * sin2u
    rfdotk = rfdot + xn * temp1 * (sec.x1mth2 * cos2u + 1.5 * sec.x3thm1)

    # Orientation vectors
    sinuk = math.sin(uk)
    cosuk = math.cos(uk)
    sinik = math.sin(xinck)
    cosik = math.cos(xinck)
    sinnok = math.sin(xnodek)
    cosnok = math.cos(xnodek)
    xmx = -sinnok * cosik
    xmy = cosnok * cosik
    u_vec = np.array([xmx * sinuk + cosnok * cosuk, xmy * sinuk + sinnok * cosuk, sinik * sinuk])
    v_vec = np.array([xmx * cosuk - cosnok * sinuk, xmy * cosuk - sinnok * sinuk, sinik * cosuk])

    return rk * u_vec, rdotk * u_vec + rfdotk * v_vec


def orbital_phase(xlt: float, xnode: float, omgadf: float) -> float:
    """Phase angle of the satellite in its orbit, radians."""
    phase = xlt - xnode - omgadf + TWO_PI
    if phase < 0.0:
        phase += TWO_PI
    return mod2pi(phase)


def propagate_near_earth(
    elements: OrbitalElements, terms: NearEarthTerms, tsince: float
) -> OrbitalVectors:
    """
    Evaluate the near-earth model.

    Args:
        elements: Element set the terms were built from
        terms: Model coefficients from init_near_earth
        tsince: Minutes since the element set epoch

    Returns:
        OrbitalVectors in earth radii and earth radii per minute
    """
    sec = terms.secular
    bstar = elements.bstar

    # Update for secular gravity and atmospheric drag
    xmdf = elements.xmo + sec.xmdot * tsince
    omgadf = elements.omegao + sec.omgdot * tsince
    xnoddf = elements.xnodeo + sec.xnodot * tsince
    omega = omgadf
    xmp = xmdf
    tsq = tsince * tsince
    xnode = xnoddf + sec.xnodcf * tsq
    tempa = 1.0 - sec.c1 * tsince
    tempe = bstar * sec.c4 * tsince
    templ = sec.t2cof * tsq

    if not terms.simple:
        delomg = terms.omgcof * tsince
        delm = terms.xmcof * (math.pow(1.0 + sec.eta * math.cos(xmdf), 3) - terms.delmo)
        temp = delomg + delm
        xmp = xmdf + temp
        omega = omgadf - temp
        tcube = tsq * tsince
        tfour = tsince * tcube
        tempa = tempa - terms.d2 * tsq - terms.d3 * tcube - terms.d4 * tfour
        tempe = tempe + bstar * terms.c5 * (math.sin(xmp) - terms.sinmo)
        templ = templ + terms.t3cof * tcube + tfour * (terms.t4cof + tsince * terms.t5cof)

    a = sec.aodp * tempa * tempa
    e = elements.eccentricity - tempe
    if e >= 1.0 or e < DECAYED_ECCENTRICITY_LIMIT or a < MIN_SEMI_MAJOR_AXIS_ER:
        raise PropagationError(
            f"{elements.name} has decayed at {tsince:.1f} min from epoch "
            f"(a={a:.4f} er, e={e:.6f})"
        )
    e = max(e, MIN_PROPAGATED_ECCENTRICITY)

    xl = xmp + omega + xnode + sec.xnodp * templ
    beta = math.sqrt(1.0 - e * e)
    xn = XKE / math.pow(a, 1.5)

    # Long period periodics
    axn = e * math.cos(omega)
    temp = 1.0 / (a * beta * beta)
    xll = temp * sec.xlcof * axn
    aynl = temp * sec.aycof
    xlt = xl + xll
    ayn = e * math.sin(omega) + aynl

    kepler = solve_kepler(mod2pi(xlt - xnode), axn, ayn)
    position, velocity = short_period_vectors(
        sec, a, xn, axn, ayn, kepler, xnode, elements.xincl
    )
    return OrbitalVectors(position, velocity, orbital_phase(xlt, xnode, omgadf), kepler.converged)
