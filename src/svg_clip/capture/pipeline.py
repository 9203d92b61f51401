"""Single-session workflow: load, measure, plan, and capture every frame."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from src.datatypes import CaptureConfig, ResolutionTier
from src.svg_clip.capture import wrapper
from src.svg_clip.capture.frames import FrameSequence
from src.svg_clip.capture.loop import CaptureState, capture_frames
from src.svg_clip.capture.session import SessionFactory, default_session_factory
from src.svg_clip.capture.timeline import Timeline
from src.svg_clip.render.dimensions import DimensionResult, resolve_dimensions
from src.svg_clip.render.errors import CaptureFailure, SvgClipError
from src.svg_clip.render.geometry import CapturePlan, plan_capture

__all__ = ["CaptureOutcome", "capture_animation"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CaptureOutcome:
    """Handoff from the rendering session to the encoder."""

    dimensions: DimensionResult
    plan: CapturePlan
    timeline: Timeline
    frames: FrameSequence


async def capture_animation(
    source: wrapper.GraphicSource,
    *,
    frames_dir: Path,
    timeline: Timeline,
    tier: ResolutionTier,
    device_scale: float,
    capture_cfg: CaptureConfig,
    session_factory: SessionFactory | None = None,
    plan_callback: Callable[[DimensionResult, CapturePlan], None] | None = None,
    progress_callback: Callable[[int], None] | None = None,
    state_callback: Callable[[CaptureState, int], None] | None = None,
) -> CaptureOutcome:
    """
    Render ``source`` in one browser session and capture ``timeline`` into ``frames_dir``.

    Local graphics are embedded in an HTML wrapper written to ``frames_dir``
    and removed once the page has loaded; remote URLs are loaded directly.
    The session is closed exactly once, after the last frame, whether or not
    capture succeeded.

    Raises:
        SvgClipError: Domain failures from loading, measuring or capturing pass through;
            anything else the session raises is reported as CaptureFailure.
    """

    factory = session_factory or default_session_factory
    frames = FrameSequence(frames_dir, timeline.count)

    try:
        async with factory(
            device_scale_factor=device_scale,
            browser_name=capture_cfg.browser,
            load_timeout_ms=capture_cfg.load_timeout_ms,
        ) as session:
            if source.is_remote:
                await session.load(source.url or "")
            else:
                wrapper_path = wrapper.write_wrapper(
                    source,
                    frames_dir,
                    transparent=capture_cfg.transparent_background,
                )
                try:
                    await session.load(wrapper_path.resolve().as_uri())
                finally:
                    wrapper_path.unlink(missing_ok=True)

            await session.wait_for_graphic(capture_cfg.selector_timeout_ms)

            dimensions = await resolve_dimensions(session)
            plan = plan_capture(dimensions.dimensions, tier, device_scale)
            logger.info(
                "Capture plan: viewport %dx%d, output %dx%d (upscaled=%s, scale=%.3f)",
                plan.viewport_width,
                plan.viewport_height,
                plan.output_width,
                plan.output_height,
                plan.upscaled,
                plan.scale_factor,
            )
            if plan_callback is not None:
                plan_callback(dimensions, plan)

            await session.set_viewport(plan.viewport_width, plan.viewport_height)
            await capture_frames(
                session,
                plan,
                timeline,
                frames,
                settle_delay_ms=capture_cfg.settle_delay_ms,
                omit_background=True,
                progress_callback=progress_callback,
                state_callback=state_callback,
            )
    except SvgClipError:
        raise
    except Exception as exc:
        raise CaptureFailure(f"Rendering session failed: {exc}") from exc

    return CaptureOutcome(dimensions=dimensions, plan=plan, timeline=timeline, frames=frames)
