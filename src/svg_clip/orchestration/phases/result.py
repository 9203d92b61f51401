from __future__ import annotations

import logging
import shutil

from rich.markup import escape

from src.svg_clip.orchestration.phases.base import Phase
from src.svg_clip.orchestration.state import CoordinatorContext, RunResult

logger = logging.getLogger('svg_clip')


class ResultPhase(Phase):
    def execute(self, context: CoordinatorContext) -> None:
        env = context.env
        reporter = env.reporter
        json_tail = context.json_tail
        outcome = context.capture
        output_path = context.output_path
        if outcome is None or output_path is None:
            raise RuntimeError("Result phase reached before the clip was encoded.")

        frames_kept = env.keep_frames
        if not frames_kept:
            try:
                shutil.rmtree(env.work_dir)
            except OSError as exc:
                frames_kept = True
                env.collected_warnings.append(
                    f"Failed to delete working directory {env.work_dir}: {exc}"
                )
            else:
                logger.debug("Removed working directory %s", env.work_dir)
        else:
            reporter.key_value("Frames", str(env.work_dir))
        json_tail.setdefault("frames", {})["kept"] = frames_kept
        json_tail["output"] = str(output_path)

        for warning in env.collected_warnings:
            reporter.warn(warning)
        warnings_list = list(dict.fromkeys(reporter.iter_warnings()))
        json_tail["warnings"] = warnings_list
        for warning in warnings_list:
            reporter.line(f"[yellow]Warning:[/yellow] {escape(warning)}")

        reporter.line(f"[green][✓][/green] Conversion completed: {escape(str(output_path))}")
        context.result = RunResult(
            source=env.render.source,
            output_path=output_path,
            frame_count=len(outcome.frames),
            config=env.cfg,
            work_dir=env.work_dir,
            frames_kept=frames_kept,
            json_tail=json_tail,
            capture=outcome,
        )
