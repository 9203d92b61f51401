"""Configuration dataclasses for the SVG-to-video renderer."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ResolutionTier(str, Enum):
    """Named target resolutions; each member carries its canonical geometry."""

    LOW = "m"
    HIGH = "h"
    ULTRA = "q"

    @property
    def width(self) -> int:
        return _TIER_GEOMETRY[self][0]

    @property
    def height(self) -> int:
        return _TIER_GEOMETRY[self][1]

    @property
    def label(self) -> str:
        return _TIER_GEOMETRY[self][2]


_TIER_GEOMETRY: Dict[ResolutionTier, tuple[int, int, str]] = {
    ResolutionTier.LOW: (1280, 720, "SD"),
    ResolutionTier.HIGH: (1920, 1080, "HD"),
    ResolutionTier.ULTRA: (3840, 2160, "UHD"),
}

DEFAULT_RESOLUTION = ResolutionTier.HIGH


class OutputFormat(str, Enum):
    """Encoding profiles supported by the ffmpeg handoff."""

    ALPHA = "alpha"
    OPAQUE = "opaque"

    @property
    def extension(self) -> str:
        return "mov" if self is OutputFormat.ALPHA else "mp4"


@dataclass
class RenderConfig:
    """Sampling parameters for the animation clip."""

    fps: int = 30
    device_scale_factor: float = 1.0
    duration_seconds: float = 10.0
    resolution: ResolutionTier = DEFAULT_RESOLUTION
    output_format: OutputFormat = OutputFormat.ALPHA


@dataclass
class CaptureConfig:
    """Browser capture behaviour."""

    settle_delay_ms: int = 50
    load_timeout_ms: int = 30000
    selector_timeout_ms: int = 10000
    transparent_background: bool = True
    browser: str = "chromium"


@dataclass
class EncoderConfig:
    """ffmpeg binary location and encoder tuning for the opaque profile."""

    ffmpeg_path: str = "ffmpeg"
    timeout_seconds: float = 600.0
    x264_crf: int = 23
    x264_preset: str = "medium"
    maxrate: str = "2M"
    bufsize: str = "4M"


@dataclass
class PathsConfig:
    """Filesystem paths configured by the user."""

    work_dir: str = ""
    keep_frames: bool = False


@dataclass
class CLIConfig:
    """CLI presentation controls."""

    emit_json_tail: bool = True


@dataclass
class AppConfig:
    """Top-level configuration aggregating all sections."""

    render: RenderConfig = field(default_factory=RenderConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)
