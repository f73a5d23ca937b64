"""
Command-line interface implementation
"""

import dataclasses

import click

from ...config import Settings, get_settings
from ...core import CourtAnalyticsError
from ...io import parse_frames, parse_positions
from ...pipeline import AnalysisSession
from ...analytics.events import (
    calculate_stats, generate_report, generate_feedback, MovementThresholds
)
from ...utils import setup_logging, load_json, save_json, pretty_json


@click.group()
@click.option('--log-level', default=None, help='Logging level (defaults to settings)')
@click.option('--config', 'config_path', type=click.Path(exists=True), default=None,
              help='Settings JSON file')
@click.pass_context
def cli(ctx, log_level, config_path):
    """Court Analytics CLI"""
    try:
        settings = Settings.from_file(config_path) if config_path else get_settings()
    except CourtAnalyticsError as e:
        raise click.ClickException(str(e))
    setup_logging(level=log_level or settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument('frames_json', type=click.Path(exists=True))
@click.option('--output', default=None, help='Write the summary JSON here')
@click.option('--include-frames', is_flag=True, help='Add per-frame states to the output JSON')
@click.option('--pixels-to-unit', type=float, default=None,
              help='Meters per pixel (defaults to court width / frame width)')
@click.pass_obj
def track(settings, frames_json, output, include_frames, pixels_to_unit):
    """Track detections from FRAMES_JSON and summarize"""
    click.echo(f"Tracking frames: {frames_json}")

    try:
        if pixels_to_unit is not None:
            settings = dataclasses.replace(settings, pixels_to_unit=pixels_to_unit).validate()
        sequence = parse_frames(load_json(frames_json))
        session = AnalysisSession(
            sequence.frame_width, sequence.frame_height,
            settings=settings, court=sequence.court
        )
        summary = session.process_sequence(sequence.frames)
    except CourtAnalyticsError as e:
        raise click.ClickException(str(e))

    click.echo("\nAnalysis complete!")
    click.echo(f"Frames processed: {summary.frames_processed}")
    click.echo(f"Tracks: {len(summary.tracks)}")
    click.echo(f"Primary track: {summary.primary_track_id}")
    click.echo(f"Total shots: {summary.total_shots}")
    click.echo(f"Court coverage: {summary.court_coverage:.1f}%")

    if output:
        result = summary.to_dict()
        if include_frames:
            result['frames'] = [frame.to_dict() for frame in session.frames]
        save_json(result, output)
        click.echo(f"\nSummary saved to: {output}")


@cli.command()
@click.argument('coords_json', type=click.Path(exists=True))
@click.option('--pixels-to-unit', type=float, default=1.0, help='Meters per pixel')
@click.option('--time-unit', type=click.Choice(['s', 'ms']), default='s',
              help='Unit of the coordinate timestamps')
@click.option('--format', 'output_format', type=click.Choice(['report', 'json']),
              default='report', help='Output format')
@click.option('--player-name', default='Player', help='Name used in the feedback text')
@click.pass_obj
def movement(settings, coords_json, pixels_to_unit, time_unit, output_format, player_name):
    """Movement statistics for the coordinates in COORDS_JSON"""
    data = load_json(coords_json)
    if isinstance(data, dict):
        data = data.get('coordinates', [])

    try:
        positions = parse_positions(data, time_unit=time_unit)
    except CourtAnalyticsError as e:
        raise click.ClickException(str(e))
    if len(positions) < 2:
        raise click.ClickException("At least two coordinates are required")
    if pixels_to_unit <= 0:
        raise click.BadParameter("must be positive", param_hint='--pixels-to-unit')

    stats = calculate_stats(positions, pixels_to_unit, MovementThresholds.from_settings(settings))

    feedback = generate_feedback(stats, player_name)
    if output_format == 'json':
        result = stats.to_dict()
        result['feedback'] = feedback
        click.echo(pretty_json(result))
    else:
        click.echo(generate_report(stats))
        click.echo(f"\nFeedback: {feedback}")


@cli.command()
@click.argument('summary_json', type=click.Path(exists=True))
@click.option('--format', 'output_format', type=click.Choice(['summary', 'tracks', 'shots']),
              default='summary', help='What to show')
def show(summary_json, output_format):
    """Show a saved analysis summary"""
    data = load_json(summary_json)

    if output_format == 'summary':
        click.echo("=== Analysis Summary ===")
        click.echo(f"Frames: {data['frames_processed']} ({data['degraded_frames']} degraded)")
        click.echo(f"Duration: {data['duration']:.2f}s")
        click.echo(f"Court coverage: {data['court_coverage']:.1f}%")
        primary = data.get('player_stats')
        if primary:
            click.echo(f"\nPrimary track {primary['id']} ({primary['class']}):")
            click.echo(f"  Distance: {primary['total_distance']:.2f} m")
            click.echo(f"  Max speed: {primary['max_speed_kmh']:.1f} km/h")
            click.echo(f"  Average speed: {primary['average_speed_kmh']:.1f} km/h")
            click.echo(f"  Shots: {primary['shots_hit']}")

    elif output_format == 'tracks':
        click.echo("=== Tracks ===")
        for track_id, stats in data.get('tracks', {}).items():
            click.echo(
                f"Track {track_id} ({stats['class']}): "
                f"{stats['total_distance']:.2f} m, max {stats['max_speed']:.2f} m/s, "
                f"coverage {stats['coverage']:.1f}%"
            )

    elif output_format == 'shots':
        click.echo("=== Shots ===")
        shot_types = data.get('shot_types', {})
        if not shot_types:
            click.echo("No shots detected")
        for shot_type, count in sorted(shot_types.items()):
            click.echo(f"  {shot_type}: {count}")


if __name__ == '__main__':
    cli()
