"""Public shim exposing the svg_clip CLI and library surface."""

from __future__ import annotations

from typing import Callable, cast

import src.svg_clip.cli_entry as _cli_entry
import src.svg_clip.preflight as _preflight
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

prepare_preflight = _preflight.prepare_preflight
PreflightResult = _preflight.PreflightResult

RunResult = runner.RunResult
RunRequest = runner.RunRequest

__all__ = (
    "run_cli",
    "main",
    "RunRequest",
    "RunResult",
    "CLIAppError",
    "SvgClipError",
    "SourceError",
    "NoGraphicFound",
    "InvalidGeometry",
    "CaptureFailure",
    "EncodeFailure",
    "OutputFormat",
    "ResolutionTier",
    "prepare_preflight",
    "PreflightResult",
)


def run_cli(
    source: str,
    output_base_path: str | None = None,
    *,
    config_path: str | None = None,
    fps: int | None = None,
    device_scale_factor: float | None = None,
    duration_ms: float | None = None,
    resolution: ResolutionTier | None = None,
    output_format: OutputFormat | None = None,
    keep_frames: bool | None = None,
    quiet: bool = False,
    verbose: bool = False,
    no_color: bool = False,
    dependencies: runner.RunDependencies | None = None,
) -> RunResult:
    """Delegate to the shared runner module."""
    request = RunRequest(
        source=source,
        output_base_path=output_base_path,
        config_path=config_path,
        fps=fps,
        device_scale_factor=device_scale_factor,
        duration_ms=duration_ms,
        resolution=resolution,
        output_format=output_format,
        keep_frames=keep_frames,
        quiet=quiet,
        verbose=verbose,
        no_color=no_color,
    )
    return runner.run(request, dependencies=dependencies)


main = _cli_entry.main


if __name__ == "__main__":
    _entry_point = cast(Callable[[], None], main)
    _entry_point()
