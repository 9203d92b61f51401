from typing import Protocol

from src.svg_clip.orchestration.state import CoordinatorContext


class Phase(Protocol):
    def execute(self, context: CoordinatorContext) -> None:
        """Execute this phase, mutating the context."""
        ...
