from __future__ import annotations

import math
from dataclasses import dataclass

from src.datatypes import ResolutionTier
from src.svg_clip.render.errors import InvalidGeometry

__all__ = [
    "CapturePlan",
    "Dimensions",
    "describe_plan",
    "floor_even",
    "format_dimensions",
    "plan_capture",
    "scale_to_cover",
]


@dataclass(frozen=True, slots=True)
class Dimensions:
    """Width/height pair in CSS pixels (user units for intrinsic sizes)."""

    width: float
    height: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.width)
            and math.isfinite(self.height)
            and self.width > 0
            and self.height > 0
        )


@dataclass(frozen=True, slots=True)
class CapturePlan:
    """Viewport and encode geometry derived once per run."""

    viewport_width: int
    viewport_height: int
    output_width: int
    output_height: int
    upscaled: bool
    scale_factor: float
    device_scale: float
    tier: ResolutionTier

    @property
    def viewport(self) -> Dimensions:
        return Dimensions(self.viewport_width, self.viewport_height)

    @property
    def output(self) -> Dimensions:
        return Dimensions(self.output_width, self.output_height)

    @property
    def reaches_tier(self) -> bool:
        return self.output_width >= self.tier.width and self.output_height >= self.tier.height


def format_dimensions(width: float, height: float) -> str:
    """Return width × height using integer values."""

    return f"{int(width)} × {int(height)}"


def floor_even(value: float) -> int:
    """Floor ``value`` down to the nearest even integer."""

    return int(math.floor(value / 2)) * 2


def scale_to_cover(width: float, height: float, target_width: int, target_height: int) -> float:
    """Return the uniform scale that makes both axes reach at least the target."""

    return max(target_width / width, target_height / height)


def _require_positive(value: float, label: str) -> float:
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidGeometry(f"{label} must be numeric (got {value!r})") from exc
    if not math.isfinite(numeric) or numeric <= 0:
        raise InvalidGeometry(f"{label} must be a positive finite number (got {value!r})")
    return numeric


def plan_capture(intrinsic: Dimensions, tier: ResolutionTier, device_scale: float) -> CapturePlan:
    """
    Compute the capture viewport and final encode dimensions for a graphic.

    Graphics already at least as large as ``tier`` on both axes are captured at
    their intrinsic size. Smaller graphics are scaled to cover the tier, floored
    to whole pixels and clamped up to the tier so floor rounding never lands
    below target. Both axes are then floored to even values.

    ``device_scale`` multiplies the viewport into the output size; the viewport
    itself (used for the capture clip) is unaffected by it.

    Raises:
        InvalidGeometry: If any input dimension or the device scale is not a positive finite number,
            or the scaled output collapses to zero pixels.
    """

    width = _require_positive(intrinsic.width, "intrinsic width")
    height = _require_positive(intrinsic.height, "intrinsic height")
    scale_device = _require_positive(device_scale, "device scale factor")
    target_w = _require_positive(tier.width, "tier width")
    target_h = _require_positive(tier.height, "tier height")

    if width >= target_w and height >= target_h:
        upscaled = False
        scale = 1.0
        planned_w, planned_h = width, height
    else:
        upscaled = True
        scale = scale_to_cover(width, height, tier.width, tier.height)
        planned_w = max(math.floor(width * scale), tier.width)
        planned_h = max(math.floor(height * scale), tier.height)

    viewport_w = floor_even(planned_w)
    viewport_h = floor_even(planned_h)
    if viewport_w <= 0 or viewport_h <= 0:
        raise InvalidGeometry(
            f"Viewport collapsed to {format_dimensions(viewport_w, viewport_h)} "
            f"for intrinsic {width}x{height}"
        )

    output_w = floor_even(viewport_w * scale_device)
    output_h = floor_even(viewport_h * scale_device)
    if output_w <= 0 or output_h <= 0:
        raise InvalidGeometry(
            f"Device scale {scale_device} reduces {format_dimensions(viewport_w, viewport_h)} "
            "below two pixels"
        )

    return CapturePlan(
        viewport_width=viewport_w,
        viewport_height=viewport_h,
        output_width=output_w,
        output_height=output_h,
        upscaled=upscaled,
        scale_factor=scale,
        device_scale=scale_device,
        tier=tier,
    )


def describe_plan(plan: CapturePlan) -> dict[str, object]:
    """Return a JSON-friendly summary of ``plan``."""

    return {
        "tier": plan.tier.name.lower(),
        "tier_width": plan.tier.width,
        "tier_height": plan.tier.height,
        "viewport": [plan.viewport_width, plan.viewport_height],
        "output": [plan.output_width, plan.output_height],
        "upscaled": plan.upscaled,
        "scale_factor": round(plan.scale_factor, 6),
        "device_scale": plan.device_scale,
    }
