"""
Tests for the CLI module.
"""

import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from sat_predict.cli import main

pytestmark = pytest.mark.usefixtures("restore_root_logger")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scenario_file(tmp_path: Path, scenario_data: Dict[str, Any]) -> Path:
    path = tmp_path / "scenario.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(scenario_data, f)
    return path


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Satellite Pass Predictor" in result.output
        for command in ("passes", "position", "track"):
            assert command in result.output

    def test_log_level_passed_to_setup(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        with patch("sat_predict.cli.setup_logging") as mock_setup:
            cli_runner.invoke(
                main,
                ["--log-level", "DEBUG", "position", "--scenario", str(scenario_file),
                 "--time", "2009-04-17 06:57:32"],
            )
        mock_setup.assert_called_once_with("DEBUG", None)

    def test_invalid_log_level(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["--log-level", "LOUD", "passes", "--help"])
        assert result.exit_code != 0


class TestPassesCommand:
    """Tests for the passes command."""

    def test_passes_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["passes", "--help"])
        assert result.exit_code == 0
        assert "--scenario" in result.output
        assert "--wind-back" in result.output

    def test_missing_scenario(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(main, ["passes"])
        assert result.exit_code != 0
        assert "Missing option" in result.output

    def test_lists_passes(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main,
            ["passes", "--scenario", str(scenario_file),
             "--start-time", "2009-01-05 00:00:00", "--hours", "3"],
        )
        assert result.exit_code == 0, result.output
        assert "2009-01-05 04:28:10" in result.output
        assert "Total passes:" in result.output

    def test_writes_json(self, cli_runner: CliRunner, scenario_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "out" / "passes.json"
        result = cli_runner.invoke(
            main,
            ["passes", "--scenario", str(scenario_file),
             "--start-time", "2009-01-05 00:00:00", "--hours", "3",
             "--frequency", "436800000", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["satellite"] == "AO-51 [+]"
        first = data["passes"][0]
        assert first["start_time"] == "2009-01-05T04:28:10"
        assert "downlink_frequency_aos" in first

    def test_bad_start_time(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main, ["passes", "--scenario", str(scenario_file), "--start-time", "yesterday"]
        )
        assert result.exit_code == 1
        assert "Could not parse datetime" in result.output

    def test_invalid_scenario(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("station:\n  latitude: 10\n  longitude: 20\n")
        result = cli_runner.invoke(
            main, ["passes", "--scenario", str(bad), "--start-time", "2009-01-05"]
        )
        assert result.exit_code == 1
        assert "elements" in result.output


class TestPositionCommand:
    """Tests for the position command."""

    def test_text_output(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main,
            ["position", "--scenario", str(scenario_file), "--time", "2009-04-17 06:57:32"],
        )
        assert result.exit_code == 0, result.output
        assert "AO-51 [+] at 2009-04-17 06:57:32 UTC" in result.output
        assert "Visible:   yes" in result.output
        assert "Eclipsed:  no" in result.output

    def test_dms_sub_point(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main,
            ["position", "--scenario", str(scenario_file),
             "--time", "2009-04-17 06:57:32", "--dms"],
        )
        assert result.exit_code == 0, result.output
        sub_point = next(
            line for line in result.output.splitlines() if line.startswith("Sub-point:")
        )
        assert sub_point.startswith("Sub-point: 32°")
        assert '"N, ' in sub_point
        assert sub_point.endswith('"W')

    def test_json_output(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main,
            ["position", "--scenario", str(scenario_file),
             "--time", "2009-04-17T06:57:32Z", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["time"] == "2009-04-17T06:57:32"
        assert data["above_horizon"] is True


class TestTrackCommand:
    """Tests for the track command."""

    def test_samples(self, cli_runner: CliRunner, scenario_file: Path) -> None:
        result = cli_runner.invoke(
            main,
            ["track", "--scenario", str(scenario_file), "--time", "2009-01-05 07:00:00",
             "--increment", "30", "--before", "50", "--after", "50"],
        )
        assert result.exit_code == 0, result.output
        assert "200 positions" in result.output

    def test_writes_json(self, cli_runner: CliRunner, scenario_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "track.json"
        result = cli_runner.invoke(
            main,
            ["track", "--scenario", str(scenario_file), "--time", "2009-01-05 07:00:00",
             "--after", "10", "--output", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(output.read_text())) == 10
