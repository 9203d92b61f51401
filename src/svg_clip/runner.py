from __future__ import annotations

from src.svg_clip.orchestration.coordinator import WorkflowCoordinator, default_run_dependencies
from src.svg_clip.orchestration.state import (
    RenderRequest,
    RunDependencies,
    RunRequest,
    RunResult,
)

__all__ = [
    "RenderRequest",
    "RunDependencies",
    "RunRequest",
    "RunResult",
    "default_run_dependencies",
    "run",
]


def run(request: RunRequest, *, dependencies: RunDependencies | None = None) -> RunResult:
    """
    Render one SVG animation to a video clip.

    This function delegates the execution to the WorkflowCoordinator.
    """
    coordinator = WorkflowCoordinator(dependencies)
    return coordinator.execute(request)
