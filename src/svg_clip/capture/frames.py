from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

from src.svg_clip.render import naming
from src.svg_clip.render.errors import CaptureFailure

__all__ = ["FrameSequence"]


class FrameSequence:
    """Ordered, gapless set of captured frame images inside one directory."""

    def __init__(self, directory: Path, count: int) -> None:
        self.directory = Path(directory)
        self.expected = int(count)
        self.digits = naming.frame_digits(count)
        self._paths: List[Path] = []

    def path_for(self, index: int) -> Path:
        return self.directory / naming.frame_filename(index, self.digits)

    @property
    def pattern(self) -> str:
        """ffmpeg input pattern for the whole sequence."""

        return str(self.directory / naming.frame_pattern(self.digits))

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    @property
    def complete(self) -> bool:
        return len(self._paths) == self.expected

    def append(self, index: int, path: Path) -> None:
        """Record ``path`` as frame ``index``; indices must arrive in order."""

        if index != len(self._paths):
            raise CaptureFailure(
                f"Frame {index} captured out of order (expected {len(self._paths)})",
                frame_index=index,
            )
        if index >= self.expected:
            raise CaptureFailure(
                f"Frame {index} exceeds the planned {self.expected} frames",
                frame_index=index,
            )
        self._paths.append(Path(path))

    def missing(self) -> List[int]:
        """Return indices whose image file is absent on disk."""

        return [index for index, path in enumerate(self._paths) if not path.is_file()]

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._paths))
