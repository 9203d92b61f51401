"""Intrinsic size detection for the loaded SVG graphic."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from src.svg_clip.render.errors import NoGraphicFound
from src.svg_clip.render.geometry import Dimensions

__all__ = [
    "FALLBACK_DIMENSIONS",
    "PROBE_SCRIPT",
    "DimensionResult",
    "parse_length",
    "parse_viewbox",
    "resolve_dimensions",
    "resolve_from_probe",
]

logger = logging.getLogger(__name__)

FALLBACK_DIMENSIONS = Dimensions(1920.0, 1080.0)

PROBE_SCRIPT = r"""
() => {
    const svg = document.querySelector('svg');
    if (!svg) return null;
    const parent = svg.parentElement;
    let bbox = null;
    try {
        const box = svg.getBBox();
        bbox = { width: box.width, height: box.height };
    } catch (e) {
        bbox = null;
    }
    return {
        viewBox: svg.getAttribute('viewBox'),
        width: svg.getAttribute('width'),
        height: svg.getAttribute('height'),
        parentWidth: parent ? parent.clientWidth : 0,
        parentHeight: parent ? parent.clientHeight : 0,
        bbox: bbox,
    };
}
"""

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class _Evaluator(Protocol):
    async def evaluate(self, script: str, arg: Any = None) -> Any: ...


@dataclass(frozen=True, slots=True)
class DimensionResult:
    """Detected intrinsic size plus the strategy that produced it."""

    dimensions: Dimensions
    strategy: str

    @property
    def is_fallback(self) -> bool:
        return self.strategy == "fallback"


def parse_viewbox(value: Optional[str]) -> Optional[Dimensions]:
    """Return the width/height components of a four-number viewBox, if any."""

    if not value:
        return None
    parts = [part for part in re.split(r"[\s,]+", value.strip()) if part]
    if len(parts) != 4:
        return None
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        return None
    return Dimensions(numbers[2], numbers[3])


def parse_length(value: Optional[str], reference: float) -> float:
    """
    Resolve an SVG width/height attribute to pixels.

    Percentages resolve against ``reference``; anything else is read the way
    ``parseFloat`` reads it, so ``"120px"`` and ``"120"`` both yield 120. Missing
    or unparsable values yield NaN.
    """

    if value is None:
        return math.nan
    text = str(value).strip()
    if not text:
        return math.nan
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return math.nan
    number = float(match.group(1))
    if text.endswith("%"):
        return float(reference) * (number / 100.0)
    return number


def resolve_from_probe(probe: Mapping[str, Any] | None) -> DimensionResult:
    """
    Apply the detection priority to raw attributes collected from the page.

    Order: viewBox, then explicit width/height attributes, then the rendered
    bounding box rounded up. A strategy is only taken when it yields a finite,
    positive pair; otherwise the fixed 1920×1080 fallback is returned and
    flagged as such.

    Raises:
        NoGraphicFound: If the probe found no SVG element.
    """

    if probe is None:
        raise NoGraphicFound("No <svg> element found in the loaded document")

    viewbox = parse_viewbox(probe.get("viewBox"))
    if viewbox is not None and viewbox.is_valid():
        return DimensionResult(viewbox, "viewBox")

    width = parse_length(probe.get("width"), _as_float(probe.get("parentWidth")))
    height = parse_length(probe.get("height"), _as_float(probe.get("parentHeight")))
    attributes = Dimensions(width, height)
    if attributes.is_valid():
        return DimensionResult(attributes, "attributes")

    bbox = probe.get("bbox")
    if isinstance(bbox, Mapping):
        bbox_w = _as_float(bbox.get("width"))
        bbox_h = _as_float(bbox.get("height"))
        if math.isfinite(bbox_w) and math.isfinite(bbox_h):
            rounded = Dimensions(float(math.ceil(bbox_w)), float(math.ceil(bbox_h)))
            if rounded.is_valid():
                return DimensionResult(rounded, "bbox")

    return DimensionResult(FALLBACK_DIMENSIONS, "fallback")


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


async def resolve_dimensions(page: _Evaluator) -> DimensionResult:
    """Probe the loaded document and resolve the graphic's intrinsic size."""

    probe = await page.evaluate(PROBE_SCRIPT)
    result = resolve_from_probe(probe)
    if result.is_fallback:
        logger.warning(
            "Could not determine SVG dimensions; falling back to %gx%g",
            result.dimensions.width,
            result.dimensions.height,
        )
    else:
        logger.info(
            "Detected SVG dimensions %gx%g via %s",
            result.dimensions.width,
            result.dimensions.height,
            result.strategy,
        )
    return result
