from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List

from src.datatypes import EncoderConfig, OutputFormat
from src.svg_clip import subproc as _subproc
from src.svg_clip.capture.frames import FrameSequence
from src.svg_clip.render.errors import EncodeFailure

__all__ = [
    "EncodeRequest",
    "build_alpha_command",
    "build_command",
    "build_opaque_command",
    "encode",
    "resolve_ffmpeg",
]

logger = logging.getLogger(__name__)

_STDERR_TAIL_LINES = 20


@dataclass(frozen=True, slots=True)
class EncodeRequest:
    """Everything ffmpeg needs to turn the frame sequence into one clip."""

    frames: FrameSequence
    output_path: Path
    fps: int
    width: int
    height: int
    output_format: OutputFormat


def resolve_ffmpeg(cfg: EncoderConfig) -> str | None:
    """Return the absolute ffmpeg path, or None when it cannot be found."""

    return shutil.which(cfg.ffmpeg_path)


def build_alpha_command(request: EncodeRequest, cfg: EncoderConfig) -> List[str]:
    """ProRes 4444 with a 10-bit alpha plane; frames are already final size."""

    return [
        cfg.ffmpeg_path,
        "-nostdin",
        "-loglevel",
        "error",
        "-r",
        str(request.fps),
        "-i",
        request.frames.pattern,
        "-y",
        "-c:v",
        "prores_ks",
        "-pix_fmt",
        "yuva444p10le",
        "-profile:v",
        "4444",
        "-vendor",
        "ap10",
        "-movflags",
        "+faststart",
        str(request.output_path),
    ]


def build_opaque_command(request: EncodeRequest, cfg: EncoderConfig) -> List[str]:
    """H.264 4:2:0 with a bounded bitrate, rescaled to the planned output size."""

    return [
        cfg.ffmpeg_path,
        "-nostdin",
        "-loglevel",
        "error",
        "-r",
        str(request.fps),
        "-i",
        request.frames.pattern,
        "-y",
        "-vcodec",
        "libx264",
        "-pix_fmt",
        "yuv420p",
        "-movflags",
        "+faststart",
        "-preset",
        cfg.x264_preset,
        "-crf",
        str(cfg.x264_crf),
        "-profile:v",
        "main",
        "-tune",
        "animation",
        "-maxrate",
        cfg.maxrate,
        "-bufsize",
        cfg.bufsize,
        "-vf",
        f"scale={int(request.width)}:{int(request.height)}",
        str(request.output_path),
    ]


def build_command(request: EncodeRequest, cfg: EncoderConfig) -> List[str]:
    if request.output_format is OutputFormat.ALPHA:
        return build_alpha_command(request, cfg)
    return build_opaque_command(request, cfg)


def _stderr_tail(raw: object) -> str:
    if isinstance(raw, bytes):
        text = raw.decode("utf-8", "ignore")
    elif isinstance(raw, str):
        text = raw
    else:
        return ""
    lines = [line for line in text.strip().splitlines() if line.strip()]
    return "\n".join(lines[-_STDERR_TAIL_LINES:])


def encode(request: EncodeRequest, cfg: EncoderConfig) -> Path:
    """
    Run ffmpeg over a complete frame sequence and return the written clip path.

    The frame directory is never touched here; on failure the frames remain
    on disk so the encode can be retried without re-rendering.

    Raises:
        EncodeFailure: If the sequence is incomplete, ffmpeg is missing, times out,
            exits non-zero, or leaves no output file behind.
    """

    frames = request.frames
    if len(frames) == 0 or not frames.complete:
        raise EncodeFailure(
            f"Refusing to encode an incomplete frame sequence ({len(frames)}/{frames.expected})"
        )
    missing = frames.missing()
    if missing:
        raise EncodeFailure(f"Frame files missing on disk: {missing[:5]}")
    if request.width <= 0 or request.height <= 0 or request.width % 2 or request.height % 2:
        raise EncodeFailure(
            f"Output dimensions must be positive and even (got {request.width}x{request.height})"
        )
    if resolve_ffmpeg(cfg) is None:
        raise EncodeFailure(f"FFmpeg executable not found: {cfg.ffmpeg_path}")

    cmd = build_command(request, cfg)
    logger.info("Encoding %d frames with ffmpeg: %s", len(frames), _subproc.format_command(cmd))

    timeout_seconds: float | None = float(cfg.timeout_seconds)
    if timeout_seconds is not None and timeout_seconds <= 0:
        timeout_seconds = None

    request.output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        process = _subproc.run_checked(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=timeout_seconds,
            text=False,
        )
    except subprocess.TimeoutExpired as exc:
        duration = timeout_seconds if timeout_seconds is not None else 0.0
        raise EncodeFailure(f"FFmpeg timed out after {duration:.1f}s") from exc
    except OSError as exc:
        raise EncodeFailure(f"Unable to launch FFmpeg: {exc}") from exc

    stderr = _stderr_tail(process.stderr)
    if process.returncode != 0:
        message = stderr or "unknown error"
        raise EncodeFailure(
            f"FFmpeg exited with code {process.returncode}: {message}",
            returncode=process.returncode,
            stderr=stderr,
        )
    if not request.output_path.is_file():
        raise EncodeFailure(
            f"FFmpeg reported success but {request.output_path} was not written",
            returncode=process.returncode,
            stderr=stderr,
        )
    logger.info("Encoded %s", request.output_path)
    return request.output_path
