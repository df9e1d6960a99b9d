"""
Tests for the deep-space orbit model and resonance integration.
"""

import dataclasses
import math

import numpy as np
import pytest

from sat_predict import deep_space
from sat_predict.constants import EARTH_RADIUS_KM, LYDDANE_INCLINATION_LIMIT
from sat_predict.deep_space import (
    ResonanceIntegrator,
    ResonanceKind,
    init_deep_space,
    propagate_deep_space,
    resonance_kind,
)
from sat_predict.elements import OrbitalElements


def _integrator(elements: OrbitalElements) -> ResonanceIntegrator:
    terms = init_deep_space(elements)
    return ResonanceIntegrator(
        terms.resonance,
        xnq=terms.secular.xnodp,
        omegaq=elements.omegao,
        omgdot=terms.secular.omgdot,
    )


class TestResonanceClassification:
    """Tests for resonance_kind and init_deep_space."""

    def test_twelve_hour_eccentric_orbit(self, ao40_elements: OrbitalElements) -> None:
        assert init_deep_space(ao40_elements).resonance.kind is ResonanceKind.HALF_DAY

    def test_molniya_orbit(self, molniya_elements: OrbitalElements) -> None:
        assert init_deep_space(molniya_elements).resonance.kind is ResonanceKind.HALF_DAY

    def test_geostationary_orbit(self, geo_elements: OrbitalElements) -> None:
        assert init_deep_space(geo_elements).resonance.kind is ResonanceKind.SYNCHRONOUS

    def test_circular_twelve_hour_orbit_not_resonant(self) -> None:
        xnq = 2.0 * 2.0 * math.pi / 1440.0
        assert resonance_kind(xnq, 0.01) is ResonanceKind.NONE
        assert resonance_kind(xnq, 0.7) is ResonanceKind.HALF_DAY

    def test_six_hour_orbit_not_resonant(self) -> None:
        elements = OrbitalElements(
            name="SIX-HOUR",
            catalog_number=90003,
            epoch_year=9,
            epoch_day=100.0,
            inclination=30.0,
            raan=10.0,
            eccentricity=0.1,
            arg_perigee=20.0,
            mean_anomaly=30.0,
            mean_motion=4.0,
        )
        assert elements.is_deep_space
        assert init_deep_space(elements).resonance.kind is ResonanceKind.NONE


class TestDeepSpaceTerms:
    """Tests for the lunar-solar initialisation."""

    def test_epoch_sidereal_angle_in_range(self, ao40_elements: OrbitalElements) -> None:
        terms = init_deep_space(ao40_elements)
        assert 0.0 <= terms.thgr < 2.0 * math.pi

    def test_all_rates_finite(self, molniya_elements: OrbitalElements) -> None:
        terms = init_deep_space(molniya_elements)
        for rate in (terms.sse, terms.ssi, terms.ssl, terms.ssg, terms.ssh):
            assert math.isfinite(rate)

    def test_equatorial_orbit_drops_node_terms(self, geo_elements: OrbitalElements) -> None:
        equatorial = dataclasses.replace(geo_elements, inclination=0.0)
        terms = init_deep_space(equatorial)
        assert terms.solar.sh == 0.0
        assert terms.lunar.sh == 0.0
        assert terms.ssh == 0.0

    def test_low_inclination_uses_lyddane(self, ao40_elements: OrbitalElements) -> None:
        assert init_deep_space(ao40_elements).xqncl < LYDDANE_INCLINATION_LIMIT


class TestResonanceIntegrator:
    """Tests for the epoch-seeded resonance integration."""

    def test_epoch_value_is_seed(self, ao40_elements: OrbitalElements) -> None:
        integrator = _integrator(ao40_elements)
        xn, xl, converged = integrator.integrate(0.0)
        assert xn == integrator.xnq
        assert xl == integrator.terms.xlamo
        assert converged

    def test_independent_of_evaluation_order(self, ao40_elements: OrbitalElements) -> None:
        forward = _integrator(ao40_elements)
        first = forward.integrate(5000.0)
        forward.integrate(20000.0)
        forward.integrate(-3000.0)
        assert forward.integrate(5000.0) == first

        fresh = _integrator(ao40_elements)
        fresh.integrate(-9000.0)
        assert fresh.integrate(5000.0) == first

    def test_clear_gives_same_values(self, geo_elements: OrbitalElements) -> None:
        integrator = _integrator(geo_elements)
        before = integrator.integrate(-4321.0)
        integrator.clear()
        assert integrator.integrate(-4321.0) == before

    def test_step_cap_reports_non_convergence(
        self, ao40_elements: OrbitalElements, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(deep_space, "RESONANCE_MAX_STEPS", 3)
        integrator = _integrator(ao40_elements)
        _, _, converged = integrator.integrate(720.0 * 10)
        assert not converged
        _, _, converged = integrator.integrate(720.0 * 2)
        assert converged


class TestPropagation:
    """Tests for propagate_deep_space."""

    @pytest.mark.parametrize("tsince", [0.0, 360.0, 1440.0, 10000.0, -2000.0])
    def test_geostationary_radius(self, geo_elements: OrbitalElements, tsince: float) -> None:
        terms = init_deep_space(geo_elements)
        vectors = propagate_deep_space(geo_elements, terms, _integrator(geo_elements), tsince)
        radius_km = float(np.linalg.norm(vectors.position)) * EARTH_RADIUS_KM
        assert radius_km == pytest.approx(42164.0, abs=150.0)

    @pytest.mark.parametrize("tsince", [0.0, 120.0, 350.0, 700.0, 5000.0])
    def test_molniya_between_perigee_and_apogee(
        self, molniya_elements: OrbitalElements, tsince: float
    ) -> None:
        terms = init_deep_space(molniya_elements)
        vectors = propagate_deep_space(
            molniya_elements, terms, _integrator(molniya_elements), tsince
        )
        radius_km = float(np.linalg.norm(vectors.position)) * EARTH_RADIUS_KM
        assert 7000.0 < radius_km < 46500.0
        assert 0.0 <= vectors.phase < 2.0 * math.pi

    def test_equatorial_orbit_is_finite(self, geo_elements: OrbitalElements) -> None:
        equatorial = dataclasses.replace(geo_elements, inclination=0.0)
        terms = init_deep_space(equatorial)
        vectors = propagate_deep_space(equatorial, terms, _integrator(equatorial), 1440.0)
        assert np.all(np.isfinite(vectors.position))
        assert np.all(np.isfinite(vectors.velocity))

    def test_low_inclination_eccentric_orbit_is_finite(
        self, ao40_elements: OrbitalElements
    ) -> None:
        terms = init_deep_space(ao40_elements)
        integrator = _integrator(ao40_elements)
        for tsince in (0.0, 100.0, 500.0, 3000.0):
            vectors = propagate_deep_space(ao40_elements, terms, integrator, tsince)
            assert np.all(np.isfinite(vectors.position))

    def test_pure_function_of_time(self, molniya_elements: OrbitalElements) -> None:
        terms = init_deep_space(molniya_elements)
        integrator = _integrator(molniya_elements)
        first = propagate_deep_space(molniya_elements, terms, integrator, 2500.0)
        propagate_deep_space(molniya_elements, terms, integrator, 90000.0)
        second = propagate_deep_space(molniya_elements, terms, integrator, 2500.0)
        assert np.array_equal(first.position, second.position)
        assert np.array_equal(first.velocity, second.velocity)
