from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

import pytest

from src.datatypes import ResolutionTier
from src.svg_clip.render import dimensions
from src.svg_clip.render.dimensions import FALLBACK_DIMENSIONS, parse_length, parse_viewbox, resolve_from_probe
from src.svg_clip.render.errors import NoGraphicFound
from src.svg_clip.render.geometry import Dimensions, plan_capture
from tests.helpers.fakes import FakeSession


def _probe(**overrides: Any) -> dict[str, Any]:
    probe: dict[str, Any] = {
        "viewBox": None,
        "width": None,
        "height": None,
        "parentWidth": 800,
        "parentHeight": 600,
        "bbox": None,
    }
    probe.update(overrides)
    return probe


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("0 0 400 300", Dimensions(400, 300)),
        ("0,0,640,480", Dimensions(640, 480)),
        ("  -10 , 5   12.5\t7.25 ", Dimensions(12.5, 7.25)),
    ],
)
def test_parse_viewbox_accepts_whitespace_and_commas(value: str, expected: Dimensions) -> None:
    assert parse_viewbox(value) == expected


@pytest.mark.parametrize("value", [None, "", "0 0 400", "0 0 a b", "0 0 1 2 3"])
def test_parse_viewbox_rejects_malformed_values(value: str | None) -> None:
    assert parse_viewbox(value) is None


def test_parse_length_reads_leading_number_and_percentages() -> None:
    assert parse_length("120px", 0) == 120
    assert parse_length("120", 0) == 120
    assert parse_length("2.5em", 0) == 2.5
    assert parse_length("50%", 800) == 400
    assert math.isnan(parse_length("auto", 800))
    assert math.isnan(parse_length(None, 800))


def test_viewbox_wins_over_attributes() -> None:
    result = resolve_from_probe(_probe(viewBox="0 0 400 300", width="100", height="100"))

    assert result.dimensions == Dimensions(400, 300)
    assert result.strategy == "viewBox"
    assert not result.is_fallback


def test_zero_viewbox_falls_through_to_attributes() -> None:
    result = resolve_from_probe(_probe(viewBox="0 0 0 0", width="50%", height="120px"))

    assert result.dimensions == Dimensions(400, 120)
    assert result.strategy == "attributes"


def test_bbox_is_rounded_up() -> None:
    result = resolve_from_probe(_probe(bbox={"width": 99.2, "height": 10.0001}))

    assert result.dimensions == Dimensions(100, 11)
    assert result.strategy == "bbox"


def test_nothing_usable_returns_flagged_fallback() -> None:
    result = resolve_from_probe(_probe(width="auto", bbox={"width": 0, "height": 0}))

    assert result.dimensions == FALLBACK_DIMENSIONS
    assert result.is_fallback


def test_missing_svg_raises_no_graphic_found() -> None:
    with pytest.raises(NoGraphicFound):
        resolve_from_probe(None)


def test_resolve_dimensions_logs_fallback_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    session = FakeSession(probe=_probe())

    with caplog.at_level(logging.WARNING, logger=dimensions.__name__):
        result = asyncio.run(dimensions.resolve_dimensions(session))

    assert result.is_fallback
    assert any("falling back" in record.getMessage() for record in caplog.records)
    assert session.evaluated(dimensions.PROBE_SCRIPT) == [None]


def test_full_size_percentages_resolve_against_initial_800_by_600_page() -> None:
    result = resolve_from_probe(_probe(width="100%", height="100%"))

    assert result.strategy == "attributes"
    assert result.dimensions == Dimensions(800, 600)

    plan = plan_capture(result.dimensions, ResolutionTier.HIGH, 1.0)

    assert plan.upscaled
    assert (plan.viewport_width, plan.viewport_height) == (1920, 1440)
