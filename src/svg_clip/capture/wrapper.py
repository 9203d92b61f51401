"""Input source classification and the HTML container used for local graphics."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

from src.svg_clip.render.errors import SourceError

__all__ = [
    "GraphicSource",
    "WRAPPER_FILENAME",
    "build_wrapper_html",
    "resolve_source",
    "write_wrapper",
]

logger = logging.getLogger(__name__)

WRAPPER_FILENAME = "svg_preview.html"

_WRAPPER_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>
        body {{
            margin: 0;
            padding: 0;
            display: flex;
            justify-content: center;
            align-items: center;
            {background}
            width: 100vw;
            height: 100vh;
            overflow: hidden;
        }}
        #svg-container {{
            width: 100%;
            height: 100%;
            display: flex;
            justify-content: center;
            align-items: center;
        }}
        svg {{
            display: block;
            max-width: 100%;
            max-height: 100%;
            width: auto;
            height: auto;
        }}
    </style>
</head>
<body>
    <div id="svg-container">
        {content}
    </div>
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class GraphicSource:
    """A resolved input: either a local SVG file or a remote URL."""

    raw: str
    local_path: Path | None = None
    url: str | None = None

    @property
    def is_remote(self) -> bool:
        return self.url is not None

    @property
    def stem(self) -> str:
        if self.local_path is not None:
            return self.local_path.stem
        name = Path(urlsplit(self.url or "").path).stem
        return name or "animation"

    def describe(self) -> str:
        return self.url if self.url is not None else str(self.local_path)


def resolve_source(raw: str, *, cwd: Path | None = None) -> GraphicSource:
    """
    Classify ``raw`` as a remote URL or a local SVG path.

    ``http(s)://`` URLs are loaded directly. ``file://`` URLs and plain paths
    must point at an existing ``.svg`` file.

    Raises:
        SourceError: For empty input, a non-SVG local path, or a missing file.
    """

    text = str(raw or "").strip()
    if not text:
        raise SourceError("No SVG source specified")
    lowered = text.lower()
    if lowered.startswith(("http://", "https://")):
        return GraphicSource(raw=text, url=text)

    if lowered.startswith("file://"):
        candidate = Path(unquote(urlsplit(text).path))
    else:
        candidate = Path(text).expanduser()
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate
    if candidate.suffix.lower() != ".svg":
        raise SourceError(f"The specified file is not an SVG file: {candidate}")
    if not candidate.is_file():
        raise SourceError(f"SVG file not found: {candidate}")
    return GraphicSource(raw=text, local_path=candidate.resolve())


def build_wrapper_html(svg_content: str, *, transparent: bool = True, title: str = "SVG Animation") -> str:
    """Embed ``svg_content`` in a full-viewport, centred HTML document."""

    background = "background: transparent;" if transparent else ""
    return _WRAPPER_TEMPLATE.format(
        title=html.escape(title),
        background=background,
        content=svg_content,
    )


def write_wrapper(source: GraphicSource, directory: Path, *, transparent: bool = True) -> Path:
    """Read the local SVG and write its HTML wrapper into ``directory``."""

    if source.local_path is None:
        raise SourceError("Remote sources are loaded directly and have no wrapper")
    try:
        content = source.local_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceError(f"SVG file must be UTF-8 encoded: {source.local_path}") from exc
    except OSError as exc:
        raise SourceError(f"Unable to read SVG file {source.local_path}: {exc}") from exc
    if content.startswith("\ufeff"):
        content = content[1:]

    directory.mkdir(parents=True, exist_ok=True)
    wrapper_path = directory / WRAPPER_FILENAME
    wrapper_path.write_text(
        build_wrapper_html(content, transparent=transparent, title=source.local_path.name),
        encoding="utf-8",
    )
    logger.debug("Wrote HTML wrapper for %s to %s", source.local_path, wrapper_path)
    return wrapper_path
