from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from tests.helpers.harness import RunHarness, make_harness

_PACKAGE_LOGGERS = ("svg_clip", "src")


@pytest.fixture(autouse=True)
def _reset_package_loggers() -> Iterator[None]:
    """Undo the RichHandler wiring the CLI installs so caplog keeps working."""

    yield
    for name in _PACKAGE_LOGGERS:
        target = logging.getLogger(name)
        for handler in list(target.handlers):
            if getattr(handler, "_svg_clip_handler", False):
                target.removeHandler(handler)
        target.setLevel(logging.NOTSET)
        target.propagate = True


@pytest.fixture
def run_harness(tmp_path: Path) -> RunHarness:
    """Provide a sample SVG, a fast config and fake collaborators under ``tmp_path``."""

    return make_harness(tmp_path)
