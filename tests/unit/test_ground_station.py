"""
Tests for ground station definitions and horizon masks.
"""

import math

import pytest

from sat_predict.ground_station import GroundStationPosition


def _stepped_mask() -> tuple:
    """Mask whose value in each sector equals the sector index."""
    return tuple(range(36))


class TestGroundStationPosition:
    """Tests for GroundStationPosition validation and serialization."""

    def test_defaults(self) -> None:
        station = GroundStationPosition(latitude=10.0, longitude=20.0)
        assert station.height_amsl == 0.0
        assert not station.has_horizon_mask

    @pytest.mark.parametrize("latitude", [-90.5, 91.0])
    def test_latitude_out_of_range(self, latitude: float) -> None:
        with pytest.raises(ValueError, match="Latitude"):
            GroundStationPosition(latitude=latitude, longitude=0.0)

    def test_non_finite_longitude(self) -> None:
        with pytest.raises(ValueError, match="Longitude"):
            GroundStationPosition(latitude=0.0, longitude=math.nan)

    def test_wrong_mask_length(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            GroundStationPosition(latitude=0.0, longitude=0.0, horizon_elevations=(5, 5))
        assert str(exc_info.value) == "Expected 36 Horizon Elevations, got: 2"

    def test_mask_stored_as_int_tuple(self) -> None:
        station = GroundStationPosition(
            latitude=0.0, longitude=0.0, horizon_elevations=[float(x) for x in range(36)]
        )
        assert station.horizon_elevations == tuple(range(36))

    def test_round_trip(self) -> None:
        station = GroundStationPosition(
            latitude=52.467,
            longitude=-2.022,
            height_amsl=200.0,
            horizon_elevations=_stepped_mask(),
            name="Home",
        )
        assert GroundStationPosition.from_dict(station.to_dict()) == station

    def test_with_horizon_mask_returns_copy(self, ground_station: GroundStationPosition) -> None:
        masked = ground_station.with_horizon_mask([3] * 36)
        assert masked.has_horizon_mask
        assert not ground_station.has_horizon_mask
        assert masked.latitude == ground_station.latitude

    def test_str(self, polar_station: GroundStationPosition) -> None:
        assert str(polar_station).startswith("Pole (89.0000°")


class TestHorizonElevation:
    """Tests for the per-sector horizon mask lookup."""

    def test_no_mask_is_zero(self, ground_station: GroundStationPosition) -> None:
        assert ground_station.horizon_elevation(1.0) == 0.0

    @pytest.mark.parametrize(
        "azimuth_deg, sector",
        [(0.0, 0), (9.9, 0), (10.5, 1), (45.0, 4), (180.0, 18), (359.9, 35)],
    )
    def test_sector_lookup(self, azimuth_deg: float, sector: int) -> None:
        station = GroundStationPosition(
            latitude=0.0, longitude=0.0, horizon_elevations=_stepped_mask()
        )
        assert station.horizon_elevation(math.radians(azimuth_deg)) == float(sector)

    def test_full_circle_wraps_to_first_sector(self) -> None:
        station = GroundStationPosition(
            latitude=0.0, longitude=0.0, horizon_elevations=_stepped_mask()
        )
        assert station.horizon_elevation(2.0 * math.pi) == 0.0
