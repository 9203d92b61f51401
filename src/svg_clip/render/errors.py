from __future__ import annotations

__all__ = [
    "CaptureFailure",
    "EncodeFailure",
    "InvalidGeometry",
    "NoGraphicFound",
    "SourceError",
    "SvgClipError",
]


class SvgClipError(RuntimeError):
    """Base class for failures raised by the rendering pipeline."""


class SourceError(SvgClipError):
    """Raised when the input graphic cannot be located or read."""


class NoGraphicFound(SvgClipError):
    """Raised when a loaded document does not contain an SVG root element."""


class InvalidGeometry(SvgClipError):
    """Raised when intrinsic or target dimensions are non-positive or non-numeric."""


class CaptureFailure(SvgClipError):
    """Raised when a frame image could not be produced."""

    def __init__(self, message: str, *, frame_index: int | None = None) -> None:
        super().__init__(message)
        self.frame_index = frame_index


class EncodeFailure(SvgClipError):
    """Raised when the external encoder exits non-zero or produces no output."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
