"""Rendering session protocol and its Playwright-backed implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any, Mapping, Optional, Protocol

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.svg_clip.render.errors import CaptureFailure, NoGraphicFound, SourceError

__all__ = [
    "GRAPHIC_SELECTOR",
    "PREPARE_SCRIPT",
    "PlaywrightSession",
    "RenderSession",
    "SessionFactory",
    "default_session_factory",
]

logger = logging.getLogger(__name__)

GRAPHIC_SELECTOR = "svg"

# Keeps the graphic laid out consistently whether it came through the wrapper or a URL.
PREPARE_SCRIPT = r"""
() => {
    const svg = document.querySelector('svg');
    if (svg) {
        svg.style.display = 'block';
        svg.style.maxWidth = '100%';
        svg.style.maxHeight = '100%';
        svg.style.width = 'auto';
        svg.style.height = 'auto';
    }
    return !!svg;
}
"""

# Measured before the capture viewport is known; percentage sizes resolve against it.
_INITIAL_VIEWPORT = {"width": 800, "height": 600}


class RenderSession(Protocol):
    """Operations the capture pipeline needs from a rendering engine."""

    async def __aenter__(self) -> "RenderSession": ...

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None: ...

    async def load(self, url: str) -> None: ...

    async def wait_for_graphic(self, timeout_ms: int) -> None: ...

    async def set_viewport(self, width: int, height: int) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def screenshot(self, path: Path, *, clip: Mapping[str, float], omit_background: bool) -> None: ...

    async def close(self) -> None: ...


class SessionFactory(Protocol):
    def __call__(
        self,
        *,
        device_scale_factor: float,
        browser_name: str,
        load_timeout_ms: int,
    ) -> RenderSession: ...


class PlaywrightSession:
    """
    One headless browser page owned by a single capture run.

    The device scale factor is fixed when the browser context is created;
    the viewport size can change afterwards without affecting it.
    """

    def __init__(
        self,
        *,
        device_scale_factor: float = 1.0,
        browser_name: str = "chromium",
        load_timeout_ms: int = 30000,
    ) -> None:
        self.device_scale_factor = float(device_scale_factor)
        self.browser_name = browser_name
        self.load_timeout_ms = int(load_timeout_ms)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._closed = False

    async def __aenter__(self) -> "PlaywrightSession":
        try:
            self._playwright = await async_playwright().start()
            browser_type = getattr(self._playwright, self.browser_name)
            self._browser = await browser_type.launch()
            self._context = await self._browser.new_context(
                viewport=dict(_INITIAL_VIEWPORT),
                device_scale_factor=self.device_scale_factor,
            )
            self._page = await self._context.new_page()
        except PlaywrightError as exc:
            await self.close()
            raise CaptureFailure(f"Unable to launch {self.browser_name}: {exc}") from exc
        except BaseException:
            await self.close()
            raise
        logger.debug(
            "Launched %s (device_scale_factor=%s)", self.browser_name, self.device_scale_factor
        )
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Rendering session is not open")
        return self._page

    async def load(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.load_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise SourceError(f"Timed out loading {url} after {self.load_timeout_ms}ms") from exc
        except PlaywrightError as exc:
            raise SourceError(f"Failed to load {url}: {exc}") from exc

    async def wait_for_graphic(self, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_selector(GRAPHIC_SELECTOR, state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NoGraphicFound(
                f"No <svg> element appeared within {timeout_ms}ms"
            ) from exc
        except PlaywrightError as exc:
            raise CaptureFailure(f"Waiting for the <svg> element failed: {exc}") from exc
        await self.evaluate(PREPARE_SCRIPT)

    async def set_viewport(self, width: int, height: int) -> None:
        try:
            await self.page.set_viewport_size({"width": int(width), "height": int(height)})
        except PlaywrightError as exc:
            raise CaptureFailure(f"Unable to resize viewport to {width}x{height}: {exc}") from exc

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self.page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise CaptureFailure(f"Page script failed: {exc}") from exc

    async def screenshot(self, path: Path, *, clip: Mapping[str, float], omit_background: bool) -> None:
        await self.page.screenshot(
            path=str(path),
            type="png",
            omit_background=omit_background,
            clip={
                "x": float(clip["x"]),
                "y": float(clip["y"]),
                "width": float(clip["width"]),
                "height": float(clip["height"]),
            },
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None


def default_session_factory(
    *,
    device_scale_factor: float,
    browser_name: str,
    load_timeout_ms: int,
) -> RenderSession:
    return PlaywrightSession(
        device_scale_factor=device_scale_factor,
        browser_name=browser_name,
        load_timeout_ms=load_timeout_ms,
    )
