"""Workspace and fake collaborators for end-to-end runner tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.svg_clip.cli_runtime import NullCliOutputManager
from src.svg_clip.runner import RunDependencies, RunRequest, default_run_dependencies
from tests.helpers.fakes import FakeEncoder, FakeSessionFactory, fake_which, fixed_clock

SAMPLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 300">'
    '<circle cx="200" cy="150" r="40"><animate attributeName="r" from="10" to="80" dur="1s"/></circle>'
    "</svg>"
)


@dataclass
class RunHarness:
    """Fake collaborators plus a workspace laid out for one render."""

    root: Path
    svg_path: Path
    config_path: Path
    work_parent: Path
    factory: FakeSessionFactory = field(default_factory=FakeSessionFactory)
    encoder: FakeEncoder = field(default_factory=FakeEncoder)

    def dependencies(self, **overrides) -> RunDependencies:
        values = {
            "session_factory": self.factory,
            "encoder": self.encoder,
            "which": fake_which,
            "clock": fixed_clock,
        }
        values.update(overrides)
        return default_run_dependencies(**values)

    def request(self, **overrides) -> RunRequest:
        values = {
            "source": str(self.svg_path),
            "config_path": str(self.config_path),
            "duration_ms": 100.0,
            "fps": 30,
            "reporter": NullCliOutputManager(),
            "cwd": self.root,
        }
        values.update(overrides)
        return RunRequest(**values)

    def frame_dirs(self) -> list[Path]:
        return sorted(self.work_parent.glob("logo_frames_*"))


def make_harness(root: Path) -> RunHarness:
    svg_path = root / "logo.svg"
    svg_path.write_text(SAMPLE_SVG, encoding="utf-8")
    work_parent = root / "work"
    config_path = root / "svg_clip.toml"
    config_path.write_text(
        "[capture]\n"
        "settle_delay_ms = 0\n"
        "\n"
        "[paths]\n"
        f"work_dir = {str(work_parent)!r}\n",
        encoding="utf-8",
    )
    return RunHarness(
        root=root,
        svg_path=svg_path,
        config_path=config_path,
        work_parent=work_parent,
    )
