"""Startup checks that run before any browser is launched."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from rich.markup import escape

from src.datatypes import AppConfig
from src.svg_clip.capture.wrapper import GraphicSource, resolve_source
from src.svg_clip.cli_runtime import CLIAppError
from src.svg_clip.render.errors import SourceError

logger = logging.getLogger(__name__)

WhichFunc = Callable[[str], Optional[str]]


@dataclass
class PreflightResult:
    """Resolved input, output base and encoder binary for one run."""

    source: GraphicSource
    output_base_path: Path
    ffmpeg_path: str


def _nearest_existing_dir(path: Path) -> Path:
    """Return the nearest existing directory for *path* (itself or ancestor)."""

    candidate = path
    if candidate.is_file():
        candidate = candidate.parent

    while not candidate.exists():
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return candidate


def _is_writable_path(path: Path, *, for_file: bool) -> bool:
    """Return True when the given path (or its nearest parent) is writable."""

    target = path.parent if for_file else path
    try:
        target = target.resolve(strict=False)
    except OSError:
        pass
    probe = _nearest_existing_dir(target)
    return probe.is_dir() and os.access(probe, os.W_OK)


def resolve_output_base(raw: str | Path | None, source: GraphicSource, *, cwd: Path | None = None) -> Path:
    """
    Return the base path that timestamped output names are derived from.

    No value, or an existing directory, yields ``<dir>/<source stem>``; any
    other value is used as given (its extension is replaced at encode time).
    """

    root = cwd or Path.cwd()
    if raw is None or str(raw).strip() == "":
        return root / source.stem
    candidate = Path(str(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = root / candidate
    if candidate.is_dir():
        return candidate / source.stem
    return candidate


def prepare_preflight(
    raw_source: str | None,
    output: str | Path | None,
    cfg: AppConfig,
    *,
    which: WhichFunc | None = None,
    cwd: Path | None = None,
) -> PreflightResult:
    """
    Validate the source, the output location and the ffmpeg binary.

    Raises:
        CLIAppError: If any check fails; nothing has been rendered at that point.
    """

    try:
        source = resolve_source(raw_source or "", cwd=cwd)
    except SourceError as exc:
        raise CLIAppError(
            str(exc),
            rich_message=f"[red]Error:[/red] {escape(str(exc))}",
        ) from exc

    output_base = resolve_output_base(output, source, cwd=cwd)
    if not _is_writable_path(output_base, for_file=True):
        message = f"Output directory is not writable: {output_base.parent}"
        raise CLIAppError(message, rich_message=f"[red]{escape(message)}[/red]")

    which_impl = which or shutil.which
    ffmpeg_path = which_impl(cfg.encoder.ffmpeg_path)
    if not ffmpeg_path:
        message = f"FFmpeg executable not found: {cfg.encoder.ffmpeg_path}"
        raise CLIAppError(
            message,
            rich_message=(
                f"[red]{escape(message)}[/red]\n"
                "Install ffmpeg or set \\[encoder].ffmpeg_path in your config."
            ),
        )

    logger.debug(
        "Preflight ok: source=%s output_base=%s ffmpeg=%s",
        source.describe(),
        output_base,
        ffmpeg_path,
    )
    return PreflightResult(
        source=source,
        output_base_path=output_base,
        ffmpeg_path=ffmpeg_path,
    )


__all__ = [
    "PreflightResult",
    "prepare_preflight",
    "resolve_output_base",
]
