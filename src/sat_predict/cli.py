"""
Command-line interface for the satellite predictor.

Every command reads a YAML scenario holding the element set and the
ground station; see ``sat_predict.config`` for the file layout.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click

from .config import load_scenario, load_search_settings
from .errors import PredictionError
from .pass_predictor import PassPredictor
from .propagator import SatellitePropagator
from .utils import (
    ensure_directory_exists,
    format_coordinates,
    format_duration,
    get_current_utc,
    parse_datetime,
    setup_logging,
    signed_longitude,
)

logger = logging.getLogger(__name__)


def _write_json(data: object, output: str) -> None:
    output_path = Path(output)
    ensure_directory_exists(output_path.parent)
    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    click.echo(f"Results saved to: {output_path}")


def _fail(action: str, error: Exception) -> None:
    logger.error(f"{action} failed: {error}")
    click.echo(f"Error: {error}", err=True)
    raise SystemExit(1)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log file path")
def main(log_level: str, log_file: Optional[str]) -> None:
    """Satellite Pass Predictor - positions, passes and tracks from orbital elements."""
    setup_logging(log_level, log_file)
    logger.info("Starting sat-predict CLI")


@main.command()
@click.option("--scenario", required=True, type=click.Path(exists=True), help="Scenario YAML file")
@click.option("--start-time", type=str, help="Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.option("--hours", default=24.0, type=float, help="Hours to search ahead (default: 24)")
@click.option("--wind-back/--no-wind-back", default=False, help="Include a pass already in progress")
@click.option("--settings", type=click.Path(), help="Search settings YAML (overrides the scenario)")
@click.option("--frequency", type=int, help="Nominal downlink frequency in Hz for Doppler at AOS")
@click.option("--output", type=click.Path(), help="Write passes to a JSON file")
def passes(
    scenario: str,
    start_time: Optional[str],
    hours: float,
    wind_back: bool,
    settings: Optional[str],
    frequency: Optional[int],
    output: Optional[str],
) -> None:
    """List the passes over the ground station in a time window."""
    try:
        start_dt = parse_datetime(start_time) if start_time else get_current_utc()
        loaded = load_scenario(scenario)
        search = load_search_settings(settings) if settings else loaded.settings

        predictor = PassPredictor(loaded.elements, loaded.station, search)
        records = predictor.get_passes(start_dt, hours, wind_back=wind_back)

        click.echo(f"Passes of {loaded.elements.name} over {loaded.station}")
        click.echo(f"{'AOS (UTC)':<20} {'LOS (UTC)':<20} {'Dur':>6} {'AOS Az':>6} {'Max El':>7} {'LOS Az':>6} Pole")
        rows = []
        for record in records:
            row = record.to_dict()
            click.echo(
                f"{record.start_time:%Y-%m-%d %H:%M:%S} {record.end_time:%Y-%m-%d %H:%M:%S} "
                f"{format_duration(record.duration.total_seconds()):>6} "
                f"{record.aos_azimuth:>6} {record.max_elevation:>7.1f} "
                f"{record.los_azimuth:>6} {record.pole_passed.value}"
            )
            if frequency is not None:
                shifted = predictor.downlink_frequency(frequency, record.start_time)
                row["downlink_frequency_aos"] = shifted
                click.echo(f"  Doppler at AOS: {shifted} Hz")
            rows.append(row)

        click.echo(f"\nTotal passes: {len(records)} ({predictor.iteration_count} evaluations)")

        if output:
            _write_json({"satellite": loaded.elements.name, "passes": rows}, output)

    except (PredictionError, ValueError, OSError) as e:
        _fail("Pass prediction", e)


@main.command()
@click.option("--scenario", required=True, type=click.Path(exists=True), help="Scenario YAML file")
@click.option("--time", "when", type=str, help="Time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.option("--json", "as_json", is_flag=True, help="Print the state as JSON")
@click.option("--dms", is_flag=True, help="Show the sub-point in degrees, minutes, seconds")
def position(scenario: str, when: Optional[str], as_json: bool, dms: bool) -> None:
    """Show the satellite position seen from the ground station."""
    try:
        when_dt = parse_datetime(when) if when else get_current_utc()
        loaded = load_scenario(scenario)
        propagator = SatellitePropagator(loaded.elements)
        state = propagator.topocentric(when_dt, loaded.station)

        if as_json:
            click.echo(json.dumps(state.to_dict(), indent=2))
            return

        click.echo(f"{loaded.elements.name} at {state.time:%Y-%m-%d %H:%M:%S} UTC")
        click.echo(
            "Sub-point: "
            + format_coordinates(
                state.latitude_deg,
                signed_longitude(state.longitude_deg),
                format="dms" if dms else "decimal",
            )
        )
        click.echo(f"Altitude:  {state.altitude:.1f} km")
        click.echo(f"Azimuth:   {state.azimuth_deg:.1f}°")
        click.echo(f"Elevation: {state.elevation_deg:.1f}°")
        click.echo(f"Range:     {state.range:.1f} km ({state.range_rate:+.3f} km/s)")
        click.echo(f"Visible:   {'yes' if state.above_horizon else 'no'}")
        click.echo(f"Eclipsed:  {'yes' if state.eclipsed else 'no'}")

    except (PredictionError, ValueError) as e:
        _fail("Position calculation", e)


@main.command()
@click.option("--scenario", required=True, type=click.Path(exists=True), help="Scenario YAML file")
@click.option("--time", "when", type=str, help="Reference time (default: now)")
@click.option("--increment", default=60, type=int, help="Seconds between samples (default: 60)")
@click.option("--before", default=0, type=int, help="Minutes before the reference time")
@click.option("--after", default=90, type=int, help="Minutes after the reference time")
@click.option("--output", type=click.Path(), help="Write the track to a JSON file")
def track(
    scenario: str,
    when: Optional[str],
    increment: int,
    before: int,
    after: int,
    output: Optional[str],
) -> None:
    """Sample the ground track and look angles around a reference time."""
    try:
        reference = parse_datetime(when) if when else get_current_utc()
        loaded = load_scenario(scenario)
        predictor = PassPredictor(loaded.elements, loaded.station, loaded.settings)
        states = predictor.get_positions(reference, increment, before, after)

        for state in states:
            click.echo(
                f"{state.time:%Y-%m-%d %H:%M:%S} "
                f"{state.latitude_deg:8.3f} {signed_longitude(state.longitude_deg):9.3f} "
                f"{state.altitude:9.1f} {state.azimuth_deg:6.1f} {state.elevation_deg:6.1f}"
            )
        click.echo(f"\n{len(states)} positions")

        if output:
            _write_json([state.to_dict() for state in states], output)

    except (PredictionError, ValueError, OSError) as e:
        _fail("Track calculation", e)


if __name__ == "__main__":
    main()
