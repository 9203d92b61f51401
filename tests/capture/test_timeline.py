from __future__ import annotations

import pytest

from src.svg_clip.capture.timeline import build_timeline


def test_one_second_at_thirty_fps() -> None:
    timeline = build_timeline(1000, 30)

    assert timeline.count == 30
    assert timeline.interval == pytest.approx(33.3333, rel=1e-4)
    assert len(list(timeline)) == 30


@pytest.mark.parametrize(
    ("duration_ms", "fps", "count"),
    [(100, 30, 3), (10000, 30, 300), (1001, 30, 31), (1, 1, 1), (2500.5, 24, 61), (0.1, 30, 1)],
)
def test_count_is_ceiling_of_duration_times_fps(duration_ms: float, fps: int, count: int) -> None:
    assert build_timeline(duration_ms, fps).count == count


@pytest.mark.parametrize(("duration_ms", "fps"), [(1000, 30), (100, 30), (2500.5, 24), (7, 60)])
def test_timestamps_increase_within_duration(duration_ms: float, fps: int) -> None:
    timeline = build_timeline(duration_ms, fps)
    stamps = list(timeline)

    assert stamps[0] == 0.0
    assert all(later > earlier for earlier, later in zip(stamps, stamps[1:]))
    assert stamps[-1] < duration_ms
    assert timeline.timestamp(len(stamps) - 1) == stamps[-1]


def test_timestamp_outside_range_raises() -> None:
    timeline = build_timeline(1000, 30)

    with pytest.raises(IndexError):
        timeline.timestamp(30)


@pytest.mark.parametrize(
    ("duration_ms", "fps"),
    [(0, 30), (-5, 30), (1000, 0), (1000, -1), (1000, 29.97), (1000, True)],
)
def test_invalid_inputs_are_rejected(duration_ms: float, fps: int) -> None:
    with pytest.raises(ValueError):
        build_timeline(duration_ms, fps)
