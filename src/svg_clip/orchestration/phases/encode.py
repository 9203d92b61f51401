from __future__ import annotations

import contextlib
import dataclasses
import logging

from src.datatypes import OutputFormat
from src.svg_clip.orchestration.phases.base import Phase
from src.svg_clip.orchestration.state import CoordinatorContext
from src.svg_clip.render import naming
from src.svg_clip.render.encoders import EncodeRequest, build_command

logger = logging.getLogger('svg_clip')


class EncodePhase(Phase):
    def execute(self, context: CoordinatorContext) -> None:
        env = context.env
        reporter = env.reporter
        render = env.render
        outcome = context.capture
        if outcome is None:
            raise RuntimeError("Encode phase reached without captured frames.")

        encoder_cfg = dataclasses.replace(env.cfg.encoder, ffmpeg_path=env.ffmpeg_path)
        output_path = naming.unique_output_path(
            render.output_base_path,
            render.output_format.extension,
            clock=context.dependencies.clock,
        )
        plan = outcome.plan
        request = EncodeRequest(
            frames=outcome.frames,
            output_path=output_path,
            fps=render.fps,
            width=plan.output_width,
            height=plan.output_height,
            output_format=render.output_format,
        )

        context.json_tail["encoder"] = {
            "format": render.output_format.value,
            "codec": "prores_ks" if render.output_format is OutputFormat.ALPHA else "libx264",
            "command": build_command(request, encoder_cfg),
        }

        reporter.section("Output")
        reporter.key_value("Output", str(output_path))
        if render.output_format is OutputFormat.ALPHA:
            reporter.key_value("Format", "MOV (ProRes 4444) with alpha channel")
        else:
            reporter.key_value("Format", "MP4 (H.264), opaque")

        status = (
            contextlib.nullcontext()
            if reporter.quiet
            else reporter.console.status("Encoding with ffmpeg...", spinner="dots")
        )
        with status:
            context.output_path = context.dependencies.encoder(request, encoder_cfg)
        logger.info("Wrote %s", context.output_path)
