from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

__all__ = ["Timeline", "build_timeline"]


@dataclass(frozen=True, slots=True)
class Timeline:
    """Evenly spaced sample timestamps covering ``[0, duration_ms)``."""

    duration_ms: float
    fps: int
    count: int

    @property
    def interval(self) -> float:
        return self.duration_ms / self.count

    def timestamp(self, index: int) -> float:
        if index < 0 or index >= self.count:
            raise IndexError(f"frame index {index} outside timeline of {self.count} frames")
        return index * self.interval

    def __iter__(self) -> Iterator[float]:
        for index in range(self.count):
            yield index * self.interval

    def __len__(self) -> int:
        return self.count


def build_timeline(duration_ms: float, fps: int) -> Timeline:
    """
    Return the sampling timeline for a clip of ``duration_ms`` at ``fps``.

    ``count`` is ``ceil(duration_ms / 1000 * fps)``. Whole-millisecond
    durations are computed in integer arithmetic so 100 ms at 30 fps yields 3
    frames rather than picking up a fourth from float rounding.
    """

    if isinstance(fps, bool) or int(fps) != fps or fps <= 0:
        raise ValueError(f"fps must be a positive integer (got {fps!r})")
    if not duration_ms > 0:
        raise ValueError(f"duration_ms must be > 0 (got {duration_ms!r})")
    fps = int(fps)
    if float(duration_ms).is_integer():
        count = -(-int(duration_ms) * fps // 1000)
    else:
        count = math.ceil(round(float(duration_ms) * fps / 1000.0, 9))
    return Timeline(duration_ms=float(duration_ms), fps=fps, count=max(1, count))
