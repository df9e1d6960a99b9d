"""
Search settings and scenario files.

Settings and scenarios are plain YAML documents:

    elements:
      name: AO-51
      catalog_number: 28375
      epoch_year: 9
      epoch_day: 105.6639197
      ...
    station:
      latitude: 52.4670
      longitude: -2.022
      height_amsl: 200
    search:
      coarse_step_seconds: 60
"""

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # type: ignore[import-untyped]

from .elements import OrbitalElements
from .errors import ConfigurationError
from .ground_station import GroundStationPosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchSettings:
    """Step sizes and orbit-fraction heuristics used by the pass search."""

    coarse_step_seconds: int = 60  # rise bracket
    fine_step_seconds: int = 5  # AOS / LOS refinement
    set_step_seconds: int = 30  # set bracket
    wind_back_fraction: float = 0.25  # of an orbit, before the first search
    skip_fraction: float = 0.75  # of an orbit, after an in-progress pass

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        for name in ("coarse_step_seconds", "fine_step_seconds", "set_step_seconds"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.fine_step_seconds > min(self.coarse_step_seconds, self.set_step_seconds):
            raise ConfigurationError(
                "fine_step_seconds must not exceed the coarse and set steps",
                suggestions=["Use a refinement step of a few seconds"],
            )
        for name in ("wind_back_fraction", "skip_fraction"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ConfigurationError(f"{name} must be in (0, 1], got {value!r}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SearchSettings":
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown search settings: {sorted(unknown)}",
                suggestions=[f"Valid settings: {sorted(known)}"],
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Scenario:
    """An element set, a ground station and the search settings to use."""

    elements: OrbitalElements
    station: GroundStationPosition
    settings: SearchSettings = field(default_factory=SearchSettings)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_search_settings(path: Union[str, Path, None]) -> SearchSettings:
    """
    Load search settings from a YAML file.

    A missing file is not an error: defaults are used and a warning logged.

    Args:
        path: Settings file; either a bare mapping or one under ``search:``

    Returns:
        SearchSettings instance
    """
    if path is None:
        return SearchSettings()

    settings_path = Path(path)
    if not settings_path.exists():
        logger.warning(f"Search settings file not found, using defaults: {settings_path}")
        return SearchSettings()

    data = _read_yaml(settings_path)
    settings = SearchSettings.from_dict(data.get("search", data))
    logger.info(f"Loaded search settings from {settings_path}")
    return settings


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load an element set and ground station from a YAML scenario file.

    Raises:
        ConfigurationError: If the file is missing or a section is invalid
    """
    scenario_path = Path(path)
    if not scenario_path.exists():
        raise ConfigurationError(
            f"Scenario file not found: {scenario_path}",
            suggestions=["Check the path passed with --scenario"],
        )

    data = _read_yaml(scenario_path)
    for section in ("elements", "station"):
        if not isinstance(data.get(section), dict):
            raise ConfigurationError(f"Scenario {scenario_path} has no '{section}' mapping")

    try:
        elements = OrbitalElements.from_dict(data["elements"])
        station = GroundStationPosition.from_dict(data["station"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid scenario {scenario_path}: {e}") from e

    settings = SearchSettings.from_dict(data.get("search"))
    logger.info(f"Loaded scenario for {elements.name} from {scenario_path}")
    return Scenario(elements=elements, station=station, settings=settings)
