from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, cast

from rich.console import Console

from src.datatypes import AppConfig, EncoderConfig, OutputFormat, ResolutionTier
from src.svg_clip.capture.pipeline import CaptureOutcome
from src.svg_clip.capture.session import SessionFactory
from src.svg_clip.capture.timeline import Timeline
from src.svg_clip.capture.wrapper import GraphicSource
from src.svg_clip.cli_runtime import CliOutputManagerProtocol, JsonTail
from src.svg_clip.preflight import WhichFunc
from src.svg_clip.render.encoders import EncodeRequest

EncoderFunc = Callable[[EncodeRequest, EncoderConfig], Path]
ClockFunc = Callable[[], _dt.datetime]


@dataclass(frozen=True)
class RenderRequest:
    """Fully resolved parameters for one render, after config and CLI overrides."""

    source: GraphicSource
    output_base_path: Path
    fps: int
    device_scale_factor: float
    duration_ms: float
    resolution: ResolutionTier = ResolutionTier.HIGH
    output_format: OutputFormat = OutputFormat.ALPHA


@dataclass
class RunEnvironment:
    cfg: AppConfig
    render: RenderRequest
    ffmpeg_path: str
    work_dir: Path
    keep_frames: bool
    reporter: CliOutputManagerProtocol
    collected_warnings: List[str]


@dataclass
class RunResult:
    source: GraphicSource
    output_path: Path
    frame_count: int
    config: AppConfig
    work_dir: Path
    frames_kept: bool
    json_tail: JsonTail | None = None
    capture: CaptureOutcome | None = None


@dataclass
class RunRequest:
    source: str | None
    output_base_path: str | None = None
    config_path: str | None = None
    fps: int | None = None
    device_scale_factor: float | None = None
    duration_ms: float | None = None
    resolution: ResolutionTier | None = None
    output_format: OutputFormat | None = None
    keep_frames: bool | None = None
    quiet: bool = False
    verbose: bool = False
    no_color: bool = False
    console: Console | None = None
    reporter: CliOutputManagerProtocol | None = None
    cwd: Path | None = None


@dataclass(slots=True)
class RunDependencies:
    """Container describing the collaborators required by the runner."""

    session_factory: SessionFactory
    encoder: EncoderFunc
    which: WhichFunc
    clock: ClockFunc | None = None


@dataclass
class CoordinatorContext:
    """
    State container for the WorkflowCoordinator execution pipeline.
    Holds all state that persists between execution phases.
    """
    request: RunRequest
    dependencies: RunDependencies

    # Setup (SetupPhase)
    env: RunEnvironment = field(init=False)
    timeline: Timeline = field(init=False)
    json_tail: JsonTail = field(default_factory=lambda: cast(JsonTail, {}))

    # Capture (CapturePhase)
    capture: Optional[CaptureOutcome] = None

    # Encode (EncodePhase)
    output_path: Optional[Path] = None

    # Result (ResultPhase)
    result: RunResult | None = None
