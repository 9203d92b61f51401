"""Seek → settle → capture loop that produces the gapless frame sequence."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from src.svg_clip.capture.frames import FrameSequence
from src.svg_clip.capture.timeline import Timeline
from src.svg_clip.render import animation
from src.svg_clip.render.errors import CaptureFailure
from src.svg_clip.render.geometry import CapturePlan

__all__ = [
    "SETTLE_DELAY_MS",
    "CaptureState",
    "capture_frames",
]

logger = logging.getLogger(__name__)

SETTLE_DELAY_MS = 50
"""Wait after each seek so the renderer paints the new animation state.

Browsers expose no "paint complete" signal for animation clock changes, so a
fixed delay stands in for one.
"""


class CaptureState(str, Enum):
    IDLE = "idle"
    SEEKING = "seeking"
    SETTLING = "settling"
    CAPTURING = "capturing"
    DONE = "done"


class _CaptureTarget(Protocol):
    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def screenshot(self, path: Path, *, clip: Mapping[str, float], omit_background: bool) -> None: ...


SleepFunc = Callable[[float], Awaitable[Any]]


async def capture_frames(
    page: _CaptureTarget,
    plan: CapturePlan,
    timeline: Timeline,
    frames: FrameSequence,
    *,
    settle_delay_ms: int = SETTLE_DELAY_MS,
    omit_background: bool = True,
    progress_callback: Callable[[int], None] | None = None,
    state_callback: Callable[[CaptureState, int], None] | None = None,
    sleep: Optional[SleepFunc] = None,
) -> FrameSequence:
    """
    Capture one PNG per timeline sample into ``frames``.

    The viewport must already be sized to ``plan``. Animations are reset to
    time zero first; each frame is then fully seeked, settled and captured
    before the next begins. A failure at any index aborts the run and leaves
    the frames captured so far on disk.

    Parameters:
        page: Rendering session exposing ``evaluate`` and ``screenshot``.
        plan: Geometry plan whose viewport defines the capture clip.
        timeline: Sample timestamps; ``len(timeline)`` frames are produced.
        frames: Empty sequence that receives the frame paths in order.
        settle_delay_ms: Fixed wait between seeking and capturing.
        omit_background: Capture with a transparent page background.
        progress_callback: Called with 1 after each saved frame.
        state_callback: Called with the loop state and frame index on every transition.
        sleep: Awaitable sleep used for the settle delay (``asyncio.sleep`` by default).

    Returns:
        FrameSequence: ``frames``, now complete.

    Raises:
        CaptureFailure: If resetting, seeking or capturing a frame fails, or a frame does not reach disk.
    """

    if len(frames) != 0:
        raise CaptureFailure("Frame sequence must start empty")
    if frames.expected != timeline.count:
        raise CaptureFailure(
            f"Frame sequence sized for {frames.expected} frames but timeline has {timeline.count}"
        )

    sleep_impl = sleep or asyncio.sleep
    clip = {
        "x": 0.0,
        "y": 0.0,
        "width": float(plan.viewport_width),
        "height": float(plan.viewport_height),
    }

    def _transition(state: CaptureState, index: int) -> None:
        if state_callback is not None:
            state_callback(state, index)

    _transition(CaptureState.IDLE, 0)
    try:
        frames.directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CaptureFailure(f"Unable to prepare frame directory '{frames.directory}': {exc}") from exc

    try:
        await animation.reset(page)
    except Exception as exc:
        raise CaptureFailure(f"Failed to reset animations: {exc}", frame_index=0) from exc
    logger.info(
        "Capturing %d frames at %d fps (interval %.3fms, clip %dx%d)",
        timeline.count,
        timeline.fps,
        timeline.interval,
        plan.viewport_width,
        plan.viewport_height,
    )

    for index, time_ms in enumerate(timeline):
        _transition(CaptureState.SEEKING, index)
        try:
            await animation.seek(page, time_ms)
        except Exception as exc:
            raise CaptureFailure(
                f"Failed to seek frame {index} to {time_ms:.3f}ms: {exc}",
                frame_index=index,
            ) from exc

        _transition(CaptureState.SETTLING, index)
        await sleep_impl(settle_delay_ms / 1000.0)

        _transition(CaptureState.CAPTURING, index)
        frame_path = frames.path_for(index)
        try:
            await page.screenshot(frame_path, clip=clip, omit_background=omit_background)
        except Exception as exc:
            raise CaptureFailure(
                f"Failed to capture frame {index} at {time_ms:.3f}ms: {exc}",
                frame_index=index,
            ) from exc
        if not frame_path.is_file():
            raise CaptureFailure(
                f"Frame {index} was not written to {frame_path}",
                frame_index=index,
            )
        frames.append(index, frame_path)
        if progress_callback is not None:
            progress_callback(1)

    _transition(CaptureState.DONE, timeline.count)
    return frames
