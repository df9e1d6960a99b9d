"""
Satellite Pass Predictor

Offline SGP4/SDP4 orbit propagation, topocentric and eclipse geometry,
and rise/set pass prediction for a satellite over a ground station.
"""

from .config import Scenario, SearchSettings, load_scenario, load_search_settings
from .elements import OrbitalElements
from .errors import (
    ConfigurationError,
    InvalidOrbitalElementsError,
    NumericNonConvergenceWarning,
    PassSearchError,
    PredictionError,
    PropagationError,
    SatelliteNotVisibleError,
)
from .ground_station import GroundStationPosition
from .pass_predictor import PassPredictor, PassRecord, PolePassed
from .propagator import PropagationModel, SatellitePropagator
from .state import EclipseState, InertialState, SatelliteState

__version__ = "0.1.0"
__author__ = "Satellite Predictor Team"

__all__ = [
    "OrbitalElements",
    "GroundStationPosition",
    "SatellitePropagator",
    "PropagationModel",
    "PassPredictor",
    "PassRecord",
    "PolePassed",
    "SatelliteState",
    "InertialState",
    "EclipseState",
    "SearchSettings",
    "Scenario",
    "load_scenario",
    "load_search_settings",
    "PredictionError",
    "InvalidOrbitalElementsError",
    "SatelliteNotVisibleError",
    "PropagationError",
    "PassSearchError",
    "ConfigurationError",
    "NumericNonConvergenceWarning",
]
