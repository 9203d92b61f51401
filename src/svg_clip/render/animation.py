"""Deterministic control of SMIL and Web Animations clocks inside the page."""

from __future__ import annotations

import logging
from typing import Any, Protocol

__all__ = [
    "RESET_SCRIPT",
    "SEEK_DECLARATIVE_SCRIPT",
    "SEEK_STYLE_SCRIPT",
    "reset",
    "seek",
]

logger = logging.getLogger(__name__)

RESET_SCRIPT = r"""
() => {
    let cancelled = 0;
    document.querySelectorAll('*').forEach((element) => {
        element.getAnimations().forEach((animation) => {
            animation.cancel();
            cancelled += 1;
        });
    });
    const svg = document.querySelector('svg');
    let smil = false;
    if (svg && typeof svg.pauseAnimations === 'function') {
        svg.pauseAnimations();
        if (typeof svg.setCurrentTime === 'function') {
            svg.setCurrentTime(0);
        }
        smil = true;
    }
    return { cancelled: cancelled, smil: smil };
}
"""

# SMIL clocks are addressed in seconds.
SEEK_DECLARATIVE_SCRIPT = r"""
(timeMs) => {
    const svg = document.querySelector('svg');
    if (svg && typeof svg.setCurrentTime === 'function') {
        svg.setCurrentTime(timeMs / 1000);
    }
}
"""

# Web Animations (CSS animations and transitions) are addressed in milliseconds.
SEEK_STYLE_SCRIPT = r"""
(timeMs) => {
    document.querySelectorAll('*').forEach((element) => {
        element.getAnimations().forEach((animation) => {
            animation.currentTime = timeMs;
        });
    });
}
"""


class _Evaluator(Protocol):
    async def evaluate(self, script: str, arg: Any = None) -> Any: ...


async def reset(page: _Evaluator) -> None:
    """Cancel every running animation and pause the SMIL timeline at zero."""

    summary = await page.evaluate(RESET_SCRIPT)
    if isinstance(summary, dict):
        logger.debug(
            "Animation reset: cancelled=%s smil=%s",
            summary.get("cancelled"),
            summary.get("smil"),
        )


async def seek(page: _Evaluator, time_ms: float) -> None:
    """
    Advance all animations in the document to ``time_ms``.

    Both mechanisms are applied on every call since a document may use either
    or both; a static graphic simply ignores them.
    """

    await page.evaluate(SEEK_DECLARATIVE_SCRIPT, float(time_ms))
    await page.evaluate(SEEK_STYLE_SCRIPT, float(time_ms))
