"""Thin subprocess wrapper used for external tool invocations."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Any, Sequence

__all__ = ["format_command", "run_checked"]

logger = logging.getLogger(__name__)


def format_command(cmd: Sequence[str]) -> str:
    """Return ``cmd`` as a copy-pasteable shell string for logs."""

    return " ".join(shlex.quote(str(part)) for part in cmd)


def run_checked(cmd: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess[Any]:
    """
    Run ``cmd`` without a shell after validating the argument vector.

    The return code is not checked here; callers inspect it so they can raise
    their own domain errors. ``subprocess.TimeoutExpired`` propagates.
    """

    if kwargs.get("shell"):
        raise ValueError("run_checked does not accept shell=True")
    argv = [str(part) for part in cmd]
    if not argv or not argv[0]:
        raise ValueError("run_checked requires a non-empty command")
    kwargs.setdefault("check", False)
    logger.debug("Running: %s", format_command(argv))
    return subprocess.run(argv, **kwargs)
