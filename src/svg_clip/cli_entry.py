"""Click CLI wiring and entry points for svg_clip."""

from __future__ import annotations

import json
import logging
from typing import Optional

import click
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from src.config_loader import coerce_output_format
from src.datatypes import OutputFormat, ResolutionTier
from src.svg_clip import runner
from src.svg_clip.cli_runtime import CLIAppError
from src.svg_clip.render.errors import (
    CaptureFailure,
    EncodeFailure,
    InvalidGeometry,
    NoGraphicFound,
    SourceError,
    SvgClipError,
)
from src.svg_clip.runner import RunRequest, RunResult

_LOGGER_NAMES = ("svg_clip", "src")
_HANDLER_MARKER = "_svg_clip_handler"

_ERROR_LABELS: dict[type[SvgClipError], str] = {
    SourceError: "Source error",
    NoGraphicFound: "No SVG found",
    InvalidGeometry: "Invalid geometry",
    CaptureFailure: "Capture failed",
    EncodeFailure: "Encoding failed",
}


def _configure_logging(*, quiet: bool, verbose: bool, no_color: bool) -> None:
    """Route package logs through a single RichHandler on stderr."""

    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    console = Console(stderr=True, no_color=no_color, highlight=False)
    for name in _LOGGER_NAMES:
        target = logging.getLogger(name)
        for existing in list(target.handlers):
            if getattr(existing, _HANDLER_MARKER, False):
                target.removeHandler(existing)
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        setattr(handler, _HANDLER_MARKER, True)
        target.addHandler(handler)
        target.setLevel(level)
        target.propagate = False


def _resolve_tier(low: bool, high: bool, ultra: bool) -> ResolutionTier | None:
    selected = [
        tier
        for tier, flag in (
            (ResolutionTier.LOW, low),
            (ResolutionTier.HIGH, high),
            (ResolutionTier.ULTRA, ultra),
        )
        if flag
    ]
    if len(selected) > 1:
        raise click.UsageError("Options -m, -h and -q are mutually exclusive.")
    return selected[0] if selected else None


def _to_cli_error(exc: SvgClipError) -> CLIAppError:
    label = "Error"
    for error_type, candidate in _ERROR_LABELS.items():
        if isinstance(exc, error_type):
            label = candidate
            break
    detail = str(exc)
    if isinstance(exc, CaptureFailure) and exc.frame_index is not None:
        label = f"{label} at frame {exc.frame_index}"
    return CLIAppError(
        f"{label}: {detail}",
        code=1,
        rich_message=f"[red]{label}:[/red] {escape(detail)}",
    )


def _run_cli_entry(
    *,
    svg_path: str | None,
    output: str | None,
    fps: int | None,
    scale: float | None,
    duration: float | None,
    output_format: OutputFormat | None,
    resolution: ResolutionTier | None,
    config_path: str | None,
    keep_frames: bool,
    quiet: bool,
    verbose: bool,
    no_color: bool,
    json_pretty: bool,
    dependencies: runner.RunDependencies | None = None,
) -> RunResult:
    """Execute the render workflow with the provided options and emit the JSON tail."""

    _configure_logging(quiet=quiet, verbose=verbose, no_color=no_color)
    request = RunRequest(
        source=svg_path,
        output_base_path=output,
        config_path=config_path,
        fps=fps,
        device_scale_factor=scale,
        duration_ms=duration * 1000.0 if duration is not None else None,
        resolution=resolution,
        output_format=output_format,
        keep_frames=True if keep_frames else None,
        quiet=quiet,
        verbose=verbose,
        no_color=no_color,
    )
    try:
        try:
            result = runner.run(request, dependencies=dependencies)
        except SvgClipError as exc:
            raise _to_cli_error(exc) from exc
    except CLIAppError as exc:
        print(exc.rich_message)
        raise click.exceptions.Exit(exc.code) from exc

    if result.config.cli.emit_json_tail and result.json_tail is not None:
        if json_pretty:
            json_output = json.dumps(result.json_tail, indent=2)
        else:
            json_output = json.dumps(result.json_tail, separators=(",", ":"))
        click.echo(json_output)
    return result


@click.command(context_settings={"help_option_names": ["--help"]})
@click.argument("svg", required=False)
@click.option("--svg", "-s", "svg_option", default=None, help="Path or URL of the SVG file.")
@click.option(
    "--output",
    "-o",
    default=None,
    help="Output base path; a timestamp and extension are appended. Defaults to ./<svg name>.",
)
@click.option("--fps", "-f", type=int, default=None, help="Frames per second (default 30).")
@click.option("--scale", "-c", type=float, default=None, help="Device scale factor for rendering (default 1).")
@click.option("--duration", "-d", type=float, default=None, help="Clip duration in seconds (default 10).")
@click.option(
    "--format",
    "-t",
    "format_name",
    type=click.Choice(["mov", "mp4"], case_sensitive=False),
    default=None,
    help="Output format: mov (ProRes 4444 with alpha) or mp4 (H.264).",
)
@click.option("-m", "res_low", is_flag=True, help="SD output (1280x720).")
@click.option("-h", "res_high", is_flag=True, help="HD output (1920x1080), the default.")
@click.option("-q", "res_ultra", is_flag=True, help="UHD output (3840x2160).")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Path to a TOML config file.",
)
@click.option("--keep-frames", is_flag=True, help="Keep the captured PNG frames after encoding.")
@click.option("--quiet", is_flag=True, help="Suppress console output except errors and the JSON tail.")
@click.option("--verbose", is_flag=True, help="Show additional diagnostic output during run.")
@click.option("--no-color", is_flag=True, help="Disable ANSI colour output.")
@click.option("--json-pretty", is_flag=True, help="Pretty-print the JSON tail output.")
def main(
    svg: Optional[str],
    svg_option: Optional[str],
    output: Optional[str],
    fps: Optional[int],
    scale: Optional[float],
    duration: Optional[float],
    format_name: Optional[str],
    res_low: bool,
    res_high: bool,
    res_ultra: bool,
    config_path: Optional[str],
    keep_frames: bool,
    quiet: bool,
    verbose: bool,
    no_color: bool,
    json_pretty: bool,
) -> None:
    """Convert an animated SVG into a video clip."""

    svg_path = svg_option or svg
    if not svg_path:
        raise click.UsageError("No SVG file specified. Please provide an SVG file path.")
    if quiet and verbose:
        raise click.UsageError("Cannot use --quiet together with --verbose.")
    resolution = _resolve_tier(res_low, res_high, res_ultra)
    output_format = coerce_output_format(format_name, "--format") if format_name else None

    _run_cli_entry(
        svg_path=svg_path,
        output=output,
        fps=fps,
        scale=scale,
        duration=duration,
        output_format=output_format,
        resolution=resolution,
        config_path=config_path,
        keep_frames=keep_frames,
        quiet=quiet,
        verbose=verbose,
        no_color=no_color,
        json_pretty=json_pretty,
    )
