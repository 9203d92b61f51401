"""Runtime data structures and CLI helpers shared between Click wiring and the runner."""

from __future__ import annotations

import io
from typing import List, Optional, Protocol, TypedDict

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, ProgressColumn


class SourceJSON(TypedDict):
    input: str
    remote: bool


class GeometryJSON(TypedDict, total=False):
    intrinsic: List[float]
    strategy: str
    fallback: bool
    tier: str
    tier_width: int
    tier_height: int
    viewport: List[int]
    output: List[int]
    upscaled: bool
    scale_factor: float
    device_scale: float


class FramesJSON(TypedDict, total=False):
    count: int
    fps: int
    duration_ms: float
    interval_ms: float
    work_dir: str
    kept: bool


class EncoderJSON(TypedDict, total=False):
    format: str
    codec: str
    command: List[str]


class JsonTail(TypedDict, total=False):
    source: SourceJSON
    output: Optional[str]
    frames: FramesJSON
    geometry: GeometryJSON
    encoder: EncoderJSON
    warnings: List[str]


class CLIAppError(RuntimeError):
    """Raised when the CLI cannot complete its work."""

    def __init__(self, message: str, *, code: int = 1, rich_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.rich_message = rich_message or message


class CliOutputManagerProtocol(Protocol):
    quiet: bool
    verbose: bool
    console: Console

    def warn(self, text: str) -> None: ...

    def get_warnings(self) -> List[str]: ...

    def banner(self, text: str) -> None: ...

    def section(self, title: str) -> None: ...

    def line(self, text: str) -> None: ...

    def key_value(self, key: str, value: object) -> None: ...

    def verbose_line(self, text: str) -> None: ...

    def progress(self, *columns: ProgressColumn, transient: bool = False) -> Progress: ...

    def iter_warnings(self) -> List[str]: ...


class CliOutputManager:
    """Rich console presentation for a single CLI run."""

    def __init__(
        self,
        *,
        quiet: bool,
        verbose: bool,
        no_color: bool,
        console: Console | None = None,
    ) -> None:
        self.quiet = quiet
        self.verbose = verbose and not quiet
        self.no_color = no_color
        self.console = console or Console(no_color=no_color, highlight=False)
        self._warnings: List[str] = []

    def warn(self, text: str) -> None:
        self._warnings.append(text)

    def get_warnings(self) -> List[str]:
        return list(self._warnings)

    def banner(self, text: str) -> None:
        if self.quiet:
            self.console.print(text)
            return
        self.console.print(f"[bold bright_cyan]{escape(text)}[/]")

    def section(self, title: str) -> None:
        if self.quiet:
            return
        self.console.print(f"[bold cyan]{title}[/]")

    def line(self, text: str) -> None:
        if self.quiet:
            return
        self.console.print(text)

    def key_value(self, key: str, value: object) -> None:
        if self.quiet:
            return
        self.console.print(f"  [dim]{escape(key)}:[/] {escape(str(value))}")

    def verbose_line(self, text: str) -> None:
        if self.quiet or not self.verbose:
            return
        if not text:
            return
        self.console.print(f"[dim]{escape(text)}[/]")

    def progress(self, *columns: ProgressColumn, transient: bool = False) -> Progress:
        return Progress(*columns, console=self.console, transient=transient, disable=self.quiet)

    def iter_warnings(self) -> List[str]:
        return list(self._warnings)


class NullCliOutputManager(CliOutputManagerProtocol):
    """
    Minimal CliOutputManager implementation that discards console output.

    Used by automation callers (or tests) that want no Rich output while
    still collecting warnings and JSON-tail metadata.
    """

    def __init__(
        self,
        *,
        quiet: bool = True,
        verbose: bool = False,
        no_color: bool = True,
        console: Console | None = None,
    ) -> None:
        self.quiet = True
        self.verbose = False
        self.no_color = no_color
        self.console = console or Console(
            file=io.StringIO(),
            no_color=True,
            highlight=False,
            force_terminal=False,
            width=80,
        )
        self._warnings: List[str] = []

    def warn(self, text: str) -> None:
        self._warnings.append(text)

    def get_warnings(self) -> List[str]:
        return list(self._warnings)

    def banner(self, text: str) -> None:  # noqa: ARG002
        return None

    def section(self, title: str) -> None:  # noqa: ARG002
        return None

    def line(self, text: str) -> None:  # noqa: ARG002
        return None

    def key_value(self, key: str, value: object) -> None:  # noqa: ARG002
        return None

    def verbose_line(self, text: str) -> None:  # noqa: ARG002
        return None

    def progress(self, *columns: ProgressColumn, transient: bool = False) -> Progress:
        return Progress(*columns, console=self.console, transient=transient, disable=True)

    def iter_warnings(self) -> List[str]:
        return list(self._warnings)


__all__ = [
    "CLIAppError",
    "CliOutputManager",
    "CliOutputManagerProtocol",
    "EncoderJSON",
    "FramesJSON",
    "GeometryJSON",
    "JsonTail",
    "NullCliOutputManager",
    "SourceJSON",
]
