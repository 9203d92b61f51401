"""Frame and output file naming helpers."""

from __future__ import annotations

import datetime as _dt
import re
from pathlib import Path
from typing import Callable

__all__ = [
    "FRAME_PREFIX",
    "MIN_FRAME_DIGITS",
    "frame_digits",
    "frame_filename",
    "frame_pattern",
    "generate_timestamp",
    "safe_stem",
    "unique_output_path",
]

FRAME_PREFIX = "frame-"
MIN_FRAME_DIGITS = 4

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def frame_digits(count: int) -> int:
    """Return the zero-pad width needed to name ``count`` frames."""

    return max(MIN_FRAME_DIGITS, len(str(max(0, int(count) - 1))))


def frame_filename(index: int, digits: int = MIN_FRAME_DIGITS) -> str:
    return f"{FRAME_PREFIX}{int(index):0{digits}d}.png"


def frame_pattern(digits: int = MIN_FRAME_DIGITS) -> str:
    """Return the printf-style pattern ffmpeg uses to read the frame sequence."""

    return f"{FRAME_PREFIX}%0{digits}d.png"


def generate_timestamp(now: _dt.datetime | None = None) -> str:
    """Return a compact UTC timestamp, ``YYYYMMDDHHMMSSmmm``."""

    moment = now if now is not None else _dt.datetime.now(_dt.timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(_dt.timezone.utc)
    return moment.strftime("%Y%m%d%H%M%S") + f"{moment.microsecond // 1000:03d}"


def unique_output_path(
    base_path: Path,
    extension: str,
    *,
    clock: Callable[[], _dt.datetime] | None = None,
) -> Path:
    """
    Build ``<dir>/<stem>_<timestamp>.<extension>`` from ``base_path``.

    Any extension already present on ``base_path`` is replaced.
    """

    base = Path(base_path)
    stamp = generate_timestamp(clock() if clock is not None else None)
    suffix = extension.lstrip(".")
    return base.parent / f"{base.stem}_{stamp}.{suffix}"


def safe_stem(stem: str, *, fallback: str = "animation", max_length: int = 64) -> str:
    """Reduce ``stem`` to characters that are safe in a directory prefix."""

    cleaned = _UNSAFE_CHARS.sub("_", stem).strip("._")
    return cleaned[:max_length] or fallback
