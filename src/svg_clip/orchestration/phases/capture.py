from __future__ import annotations

import asyncio
import logging

from rich.progress import BarColumn, MofNCompleteColumn, TextColumn, TimeElapsedColumn

from src.svg_clip.capture.pipeline import capture_animation
from src.svg_clip.orchestration.phases.base import Phase
from src.svg_clip.orchestration.state import CoordinatorContext
from src.svg_clip.render.dimensions import DimensionResult
from src.svg_clip.render.geometry import CapturePlan, describe_plan, format_dimensions

logger = logging.getLogger('svg_clip')


class CapturePhase(Phase):
    def execute(self, context: CoordinatorContext) -> None:
        env = context.env
        reporter = env.reporter
        render = env.render
        timeline = context.timeline

        def _on_plan(dimensions: DimensionResult, plan: CapturePlan) -> None:
            intrinsic = dimensions.dimensions
            if dimensions.is_fallback:
                env.collected_warnings.append(
                    "Could not determine the SVG's size; assumed "
                    f"{format_dimensions(intrinsic.width, intrinsic.height)}"
                )
            if plan.upscaled and not plan.reaches_tier:
                env.collected_warnings.append(
                    "Could not reach full target resolution: output "
                    f"{format_dimensions(plan.output_width, plan.output_height)} is below "
                    f"{plan.tier.label} ({format_dimensions(plan.tier.width, plan.tier.height)})"
                )
            geometry = describe_plan(plan)
            geometry["intrinsic"] = [intrinsic.width, intrinsic.height]
            geometry["strategy"] = dimensions.strategy
            geometry["fallback"] = dimensions.is_fallback
            context.json_tail["geometry"] = geometry  # type: ignore[typeddict-item]

            reporter.section("Geometry")
            reporter.key_value(
                "Intrinsic",
                f"{format_dimensions(intrinsic.width, intrinsic.height)} ({dimensions.strategy})",
            )
            reporter.key_value("Viewport", format_dimensions(plan.viewport_width, plan.viewport_height))
            reporter.key_value("Output", format_dimensions(plan.output_width, plan.output_height))
            if plan.upscaled:
                reporter.key_value("Upscaled", f"x{plan.scale_factor:.3f} to reach {plan.tier.label}")

        progress = reporter.progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            transient=False,
        )
        reporter.section("Capture")
        with progress:
            task_id = progress.add_task("Capturing frames", total=timeline.count)

            def _advance(count: int) -> None:
                progress.update(task_id, advance=count)

            outcome = asyncio.run(
                capture_animation(
                    render.source,
                    frames_dir=env.work_dir,
                    timeline=timeline,
                    tier=render.resolution,
                    device_scale=render.device_scale_factor,
                    capture_cfg=env.cfg.capture,
                    session_factory=context.dependencies.session_factory,
                    plan_callback=_on_plan,
                    progress_callback=_advance,
                )
            )

        context.capture = outcome
        logger.info("Captured %d frames into %s", len(outcome.frames), env.work_dir)
