"""
Tests for search settings and scenario loading.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from sat_predict.config import (
    Scenario,
    SearchSettings,
    load_scenario,
    load_search_settings,
)
from sat_predict.errors import ConfigurationError


def _write_yaml(path: Path, data: Any) -> Path:
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path


class TestSearchSettings:
    """Tests for SearchSettings validation."""

    def test_defaults(self) -> None:
        settings = SearchSettings()
        assert settings.coarse_step_seconds == 60
        assert settings.fine_step_seconds == 5
        assert settings.set_step_seconds == 30
        assert settings.wind_back_fraction == 0.25
        assert settings.skip_fraction == 0.75

    @pytest.mark.parametrize("value", [0, -5, 2.5])
    def test_step_must_be_positive_integer(self, value: Any) -> None:
        with pytest.raises(ConfigurationError, match="coarse_step_seconds"):
            SearchSettings(coarse_step_seconds=value)

    def test_fine_step_not_larger_than_coarse(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            SearchSettings(fine_step_seconds=45)
        assert exc_info.value.suggestions

    @pytest.mark.parametrize("value", [0.0, 1.5, -0.25])
    def test_fraction_range(self, value: float) -> None:
        with pytest.raises(ConfigurationError, match="skip_fraction"):
            SearchSettings(skip_fraction=value)

    def test_from_dict_none(self) -> None:
        assert SearchSettings.from_dict(None) == SearchSettings()

    def test_from_dict_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown search settings"):
            SearchSettings.from_dict({"coarse_step": 60})

    def test_dict_round_trip(self) -> None:
        settings = SearchSettings(coarse_step_seconds=120, set_step_seconds=20)
        assert SearchSettings.from_dict(settings.to_dict()) == settings

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            SearchSettings(set_step_seconds=0)


class TestLoadSearchSettings:
    """Tests for load_search_settings."""

    def test_none_gives_defaults(self) -> None:
        assert load_search_settings(None) == SearchSettings()

    def test_missing_file_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sat_predict.config"):
            settings = load_search_settings(tmp_path / "absent.yaml")
        assert settings == SearchSettings()
        assert "not found" in caplog.text

    def test_search_section(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "settings.yaml", {"search": {"coarse_step_seconds": 30}})
        assert load_search_settings(path).coarse_step_seconds == 30

    def test_bare_mapping(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "settings.yaml", {"fine_step_seconds": 2})
        assert load_search_settings(str(path)).fine_step_seconds == 2

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_search_settings(path) == SearchSettings()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("search: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_search_settings(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "list.yaml", [1, 2, 3])
        with pytest.raises(ConfigurationError, match="mapping"):
            load_search_settings(path)


class TestLoadScenario:
    """Tests for load_scenario."""

    def test_loads_elements_and_station(
        self, tmp_path: Path, scenario_data: Dict[str, Any], ao51_elements: Any
    ) -> None:
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        scenario = load_scenario(path)
        assert isinstance(scenario, Scenario)
        assert scenario.elements == ao51_elements
        assert scenario.station.latitude == pytest.approx(52.467)
        assert scenario.settings == SearchSettings()

    def test_search_section_applied(self, tmp_path: Path, scenario_data: Dict[str, Any]) -> None:
        scenario_data["search"] = {"set_step_seconds": 20}
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        assert load_scenario(path).settings.set_step_seconds == 20

    def test_horizon_mask(self, tmp_path: Path, scenario_data: Dict[str, Any]) -> None:
        scenario_data["station"]["horizon_elevations"] = [3] * 36
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        assert load_scenario(path).station.horizon_elevations == (3,) * 36

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_scenario(tmp_path / "absent.yaml")

    @pytest.mark.parametrize("section", ["elements", "station"])
    def test_missing_section(
        self, tmp_path: Path, scenario_data: Dict[str, Any], section: str
    ) -> None:
        del scenario_data[section]
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        with pytest.raises(ConfigurationError, match=section):
            load_scenario(path)

    def test_invalid_elements(self, tmp_path: Path, scenario_data: Dict[str, Any]) -> None:
        scenario_data["elements"]["eccentricity"] = 1.2
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        with pytest.raises(ConfigurationError, match="eccentricity"):
            load_scenario(path)

    def test_invalid_station(self, tmp_path: Path, scenario_data: Dict[str, Any]) -> None:
        scenario_data["station"]["horizon_elevations"] = [0, 0]
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        with pytest.raises(ConfigurationError, match="Horizon Elevations"):
            load_scenario(path)

    def test_unknown_station_field(self, tmp_path: Path, scenario_data: Dict[str, Any]) -> None:
        scenario_data["station"]["altitude"] = 200
        path = _write_yaml(tmp_path / "scenario.yaml", scenario_data)
        with pytest.raises(ConfigurationError):
            load_scenario(path)
