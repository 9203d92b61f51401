from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from rich.markup import escape

from src.config_loader import ConfigError, load_config, validate_config
from src.datatypes import AppConfig
from src.svg_clip.capture.timeline import build_timeline
from src.svg_clip.cli_runtime import CLIAppError, CliOutputManager, CliOutputManagerProtocol
from src.svg_clip.orchestration.phases.base import Phase
from src.svg_clip.orchestration.state import (
    CoordinatorContext,
    RenderRequest,
    RunEnvironment,
    RunRequest,
)
from src.svg_clip.preflight import prepare_preflight
from src.svg_clip.render import naming

logger = logging.getLogger('svg_clip')


def _load_config(request: RunRequest) -> AppConfig:
    try:
        cfg = load_config(request.config_path)
    except ConfigError as exc:
        raise CLIAppError(
            f"Config error: {exc}",
            code=2,
            rich_message=f"[red]Config error:[/red] {escape(str(exc))}",
        ) from exc
    if request.config_path and not Path(request.config_path).is_file():
        logger.warning("Config file %s not found; using defaults", request.config_path)
    return cfg


def _apply_overrides(cfg: AppConfig, request: RunRequest) -> AppConfig:
    """Overlay per-run CLI values on the loaded config and re-validate."""

    render = cfg.render
    if request.fps is not None:
        render.fps = request.fps
    if request.device_scale_factor is not None:
        render.device_scale_factor = request.device_scale_factor
    if request.duration_ms is not None:
        render.duration_seconds = float(request.duration_ms) / 1000.0
    if request.resolution is not None:
        render.resolution = request.resolution
    if request.output_format is not None:
        render.output_format = request.output_format
    if request.keep_frames is not None:
        cfg.paths.keep_frames = bool(request.keep_frames)
    try:
        return validate_config(cfg)
    except ConfigError as exc:
        raise CLIAppError(
            str(exc),
            code=2,
            rich_message=f"[red]Invalid option:[/red] {escape(str(exc))}",
        ) from exc


def _make_work_dir(cfg: AppConfig, stem: str) -> Path:
    """Create an empty directory for this run's frames."""

    try:
        if cfg.paths.work_dir:
            parent = Path(cfg.paths.work_dir).expanduser()
            parent.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=f"{stem}_frames_", dir=parent))
        return Path(tempfile.mkdtemp(prefix="svg_clip_"))
    except OSError as exc:
        raise CLIAppError(
            f"Unable to create working directory: {exc}",
            rich_message=f"[red]Unable to create working directory:[/red] {escape(str(exc))}",
        ) from exc


def _build_reporter(request: RunRequest) -> CliOutputManagerProtocol:
    if request.reporter is not None:
        return request.reporter
    return CliOutputManager(
        quiet=request.quiet,
        verbose=request.verbose,
        no_color=request.no_color,
        console=request.console,
    )


class SetupPhase(Phase):
    def execute(self, context: CoordinatorContext) -> None:
        request = context.request
        reporter = _build_reporter(request)

        cfg = _apply_overrides(_load_config(request), request)
        preflight = prepare_preflight(
            request.source,
            request.output_base_path,
            cfg,
            which=context.dependencies.which,
            cwd=request.cwd,
        )
        source = preflight.source
        render = RenderRequest(
            source=source,
            output_base_path=preflight.output_base_path,
            fps=cfg.render.fps,
            device_scale_factor=cfg.render.device_scale_factor,
            duration_ms=round(cfg.render.duration_seconds * 1000.0, 6),
            resolution=cfg.render.resolution,
            output_format=cfg.render.output_format,
        )
        timeline = build_timeline(render.duration_ms, render.fps)
        work_dir = _make_work_dir(cfg, naming.safe_stem(source.stem))

        context.env = RunEnvironment(
            cfg=cfg,
            render=render,
            ffmpeg_path=preflight.ffmpeg_path,
            work_dir=work_dir,
            keep_frames=cfg.paths.keep_frames,
            reporter=reporter,
            collected_warnings=[],
        )
        context.timeline = timeline
        context.json_tail["source"] = {"input": source.describe(), "remote": source.is_remote}
        context.json_tail["frames"] = {
            "count": timeline.count,
            "fps": timeline.fps,
            "duration_ms": timeline.duration_ms,
            "interval_ms": round(timeline.interval, 6),
            "work_dir": str(work_dir),
            "kept": cfg.paths.keep_frames,
        }

        tier = render.resolution
        reporter.banner("svg-clip")
        reporter.section("Input")
        reporter.key_value("Source", source.describe())
        reporter.key_value("Resolution", f"{tier.label} ({tier.width}x{tier.height})")
        reporter.key_value("Format", f"{render.output_format.value} (.{render.output_format.extension})")
        reporter.key_value(
            "Timing",
            f"{render.duration_ms / 1000.0:g}s at {render.fps} fps -> {timeline.count} frames",
        )
        reporter.key_value("Device scale", f"{render.device_scale_factor:g}")
        reporter.verbose_line(f"Working directory: {work_dir}")
        reporter.verbose_line(f"FFmpeg: {preflight.ffmpeg_path}")
        logger.info(
            "Rendering %s: %d frames at %d fps, tier %s, format %s",
            source.describe(),
            timeline.count,
            timeline.fps,
            tier.label,
            render.output_format.value,
        )
