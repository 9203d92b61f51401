from __future__ import annotations

import logging
import shutil

from src.svg_clip.capture.session import SessionFactory, default_session_factory
from src.svg_clip.orchestration.phases.capture import CapturePhase
from src.svg_clip.orchestration.phases.encode import EncodePhase
from src.svg_clip.orchestration.phases.result import ResultPhase
from src.svg_clip.orchestration.phases.setup import SetupPhase
from src.svg_clip.orchestration.state import (
    ClockFunc,
    CoordinatorContext,
    EncoderFunc,
    RunDependencies,
    RunRequest,
    RunResult,
)
from src.svg_clip.preflight import WhichFunc
from src.svg_clip.render.encoders import encode

logger = logging.getLogger('svg_clip')


def default_run_dependencies(
    *,
    session_factory: SessionFactory | None = None,
    encoder: EncoderFunc | None = None,
    which: WhichFunc | None = None,
    clock: ClockFunc | None = None,
) -> RunDependencies:
    """
    Build the default collaborator bundle used by :func:`run`.

    Playwright renders, ffmpeg encodes and ``shutil.which`` locates binaries;
    tests inject fakes for any of them.
    """

    return RunDependencies(
        session_factory=session_factory or default_session_factory,
        encoder=encoder or encode,
        which=which or shutil.which,
        clock=clock,
    )


class WorkflowCoordinator:
    def __init__(self, dependencies: RunDependencies | None = None):
        self.dependencies = dependencies

    def execute(self, request: RunRequest) -> RunResult:
        """Orchestrate the render workflow."""
        dependencies = self.dependencies or default_run_dependencies()
        context = CoordinatorContext(request=request, dependencies=dependencies)

        pipeline = [
            SetupPhase(),
            CapturePhase(),
            EncodePhase(),
            ResultPhase(),
        ]

        for phase in pipeline:
            if context.result is not None:
                break
            try:
                phase.execute(context)
            except Exception:
                work_dir = getattr(getattr(context, "env", None), "work_dir", None)
                if work_dir is not None:
                    logger.error("Run failed; frames left in %s", work_dir)
                raise

        if context.result is None:
            raise RuntimeError("Workflow finished without producing a result.")

        return context.result
