"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- Shared element sets and ground stations
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest
from _pytest.config import Config

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "regression: compares against fixed reference values"
    )


# =============================================================================
# FIXTURES - Element sets and stations
# =============================================================================


@pytest.fixture
def ao51_data() -> Dict[str, Any]:
    """AO-51 element set fields (epoch 2009 day 105)."""
    return {
        "name": "AO-51 [+]",
        "catalog_number": 28375,
        "epoch_year": 9,
        "epoch_day": 105.6639197,
        "inclination": 98.0551,
        "raan": 118.9086,
        "eccentricity": 0.0084159,
        "arg_perigee": 315.8041,
        "mean_anomaly": 43.6444,
        "mean_motion": 14.4063845,
        "mean_motion_dot": 0.00000003,
        "mean_motion_ddot": 0.0,
        "bstar": 0.000013761,
        "orbit_number": 25195,
        "element_set_number": 364,
    }


@pytest.fixture
def ao51_elements(ao51_data: Dict[str, Any]) -> Any:
    """Low earth orbit element set."""
    from sat_predict.elements import OrbitalElements

    return OrbitalElements(**ao51_data)


@pytest.fixture
def ao40_elements() -> Any:
    """Highly eccentric 12 hour orbit with low inclination (deep space)."""
    from sat_predict.elements import OrbitalElements

    return OrbitalElements(
        name="AO-40",
        catalog_number=26609,
        epoch_year=0,
        epoch_day=326.22269097,
        inclination=6.4279,
        raan=245.5626,
        eccentricity=0.7344055,
        arg_perigee=179.5891,
        mean_anomaly=182.1915,
        mean_motion=2.03421959,
        mean_motion_dot=-0.00000581,
        bstar=0.0,
        orbit_number=10,
        element_set_number=2,
    )


@pytest.fixture
def molniya_elements() -> Any:
    """Molniya-class 12 hour orbit at the critical inclination."""
    from sat_predict.elements import OrbitalElements

    return OrbitalElements(
        name="MOLNIYA-TEST",
        catalog_number=90001,
        epoch_year=9,
        epoch_day=350.5,
        inclination=63.4,
        raan=120.0,
        eccentricity=0.72,
        arg_perigee=270.0,
        mean_anomaly=10.0,
        mean_motion=2.0057,
        bstar=0.0,
    )


@pytest.fixture
def geo_elements() -> Any:
    """Near-equatorial geostationary orbit."""
    from sat_predict.elements import OrbitalElements

    return OrbitalElements(
        name="GEO-TEST",
        catalog_number=90002,
        epoch_year=9,
        epoch_day=355.0,
        inclination=0.05,
        raan=100.0,
        eccentricity=0.0002,
        arg_perigee=90.0,
        mean_anomaly=270.0,
        mean_motion=1.00271,
        bstar=0.0,
    )


@pytest.fixture
def ground_station() -> Any:
    """Reference ground station in the English Midlands."""
    from sat_predict.ground_station import GroundStationPosition

    return GroundStationPosition(latitude=52.4670, longitude=-2.022, height_amsl=200.0)


@pytest.fixture
def polar_station() -> Any:
    """Station too far north for a low-inclination orbit to be seen."""
    from sat_predict.ground_station import GroundStationPosition

    return GroundStationPosition(latitude=89.0, longitude=0.0, height_amsl=0.0, name="Pole")


@pytest.fixture
def scenario_data(ao51_data: Dict[str, Any]) -> Dict[str, Any]:
    """Scenario mapping as written to YAML."""
    return {
        "elements": ao51_data,
        "station": {"latitude": 52.4670, "longitude": -2.022, "height_amsl": 200.0},
    }


@pytest.fixture
def base_datetime() -> datetime:
    """Start of the reference pass search window."""
    return datetime(2009, 1, 5, 0, 0, 0)


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
