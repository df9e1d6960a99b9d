"""
Tests for satellite state snapshots and footprint geometry.
"""

import math
from datetime import datetime

import numpy as np
import pytest

from sat_predict.state import InertialState, SatelliteState, calculate_range_circle


def assert_longitude_close(actual: float, expected: float, tolerance: float = 1.0) -> None:
    """Compare longitudes in degrees across the 0/360 seam."""
    diff = abs((actual - expected + 180.0) % 360.0 - 180.0)
    assert diff <= tolerance, f"longitude {actual} not within {tolerance} of {expected}"


def _state(**overrides) -> SatelliteState:
    values = dict(
        time=datetime(2009, 1, 5, 4, 30),
        latitude=math.radians(10.0),
        longitude=math.radians(350.0),
        altitude=800.0,
        phase=1.0,
        theta=0.5,
        eclipse_depth=-0.3,
        eclipsed=False,
    )
    values.update(overrides)
    return SatelliteState(**values)


class TestRangeCircle:
    """Footprint points around a sub-satellite point."""

    @pytest.mark.regression
    @pytest.mark.parametrize(
        "index, expected",
        [(0, (30.0, 0.0)), (89, (1.0, 330.0)), (179, (-30.0, 359.0)), (269, (-1.0, 30.0))],
    )
    def test_equator_at_1000_km(self, index: int, expected: tuple) -> None:
        points = calculate_range_circle(0.0, 0.0, 1000.0)
        lat, lon = points[index]
        assert lat == pytest.approx(expected[0], abs=1.0)
        assert_longitude_close(lon, expected[1])

    @pytest.mark.regression
    @pytest.mark.parametrize(
        "index, expected",
        [(0, (40.0, 10.0)), (89, (9.0, 339.0)), (179, (-20.0, 9.0)), (269, (8.0, 41.0))],
    )
    def test_offset_point_at_1000_km(self, index: int, expected: tuple) -> None:
        points = calculate_range_circle(math.radians(10.0), math.radians(10.0), 1000.0)
        lat, lon = points[index]
        assert lat == pytest.approx(expected[0], abs=1.0)
        assert_longitude_close(lon, expected[1])

    def test_has_one_point_per_degree(self) -> None:
        points = calculate_range_circle(0.2, 1.0, 500.0)
        assert len(points) == 360
        for lat, lon in points:
            assert -90.0 <= lat <= 90.0
            assert 0.0 <= lon <= 360.0

    def test_higher_orbit_has_wider_footprint(self) -> None:
        low = calculate_range_circle(0.0, 0.0, 500.0)[0][0]
        high = calculate_range_circle(0.0, 0.0, 2000.0)[0][0]
        assert high > low

    def test_state_range_circle_uses_sub_satellite_point(self) -> None:
        state = _state(latitude=0.0, longitude=0.0, altitude=1000.0)
        assert state.range_circle() == calculate_range_circle(0.0, 0.0, 1000.0)


class TestSatelliteState:
    """Tests for the SatelliteState record."""

    def test_ground_track_only_state_has_no_look_angles(self) -> None:
        state = _state()
        assert not state.has_look_angles
        assert state.azimuth_deg is None
        assert state.elevation_deg is None

    def test_degree_accessors(self) -> None:
        state = _state(azimuth=math.pi, elevation=math.pi / 6.0, range=1500.0, range_rate=-2.0)
        assert state.latitude_deg == pytest.approx(10.0)
        assert state.longitude_deg == pytest.approx(350.0)
        assert state.azimuth_deg == pytest.approx(180.0)
        assert state.elevation_deg == pytest.approx(30.0)

    def test_to_dict(self) -> None:
        state = _state(azimuth=math.pi, elevation=0.1, range=1500.0, range_rate=-2.0)
        data = state.to_dict()
        assert data["time"] == "2009-01-05T04:30:00"
        assert data["azimuth_deg"] == 180.0
        assert data["latitude_deg"] == 10.0
        assert data["converged"] is True

    def test_str_mentions_eclipse(self) -> None:
        assert "eclipsed" in str(_state(eclipsed=True))
        assert "eclipsed" not in str(_state())


class TestInertialState:
    """Tests for the InertialState record."""

    def test_radius_and_speed(self) -> None:
        state = InertialState(
            time=datetime(2009, 1, 5),
            julian_date=2454836.5,
            tsince=0.0,
            position=np.array([3000.0, 4000.0, 0.0]),
            velocity=np.array([0.0, 0.0, 7.5]),
            phase=0.0,
        )
        assert state.radius == pytest.approx(5000.0)
        assert state.speed == pytest.approx(7.5)
        assert state.converged
