from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.svg_clip.capture import session as session_module
from src.svg_clip.capture.session import PREPARE_SCRIPT, PlaywrightSession
from src.svg_clip.render.errors import CaptureFailure, NoGraphicFound, SourceError


class _FakePage:
    def __init__(self, *, goto_error: Optional[Exception] = None, selector_error: Optional[Exception] = None) -> None:
        self.goto_error = goto_error
        self.selector_error = selector_error
        self.evaluate_error: Optional[Exception] = None
        self.calls: List[tuple[str, Any]] = []

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.calls.append(("goto", (url, kwargs)))
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector: str, **kwargs: Any) -> None:
        self.calls.append(("wait_for_selector", (selector, kwargs)))
        if self.selector_error is not None:
            raise self.selector_error

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", (script, arg)))
        if self.evaluate_error is not None:
            raise self.evaluate_error
        return True

    async def set_viewport_size(self, size: Dict[str, int]) -> None:
        self.calls.append(("set_viewport_size", size))

    async def screenshot(self, **kwargs: Any) -> None:
        self.calls.append(("screenshot", kwargs))


class _FakeContext:
    def __init__(self, page: _FakePage) -> None:
        self.page = page
        self.closed = 0

    async def new_page(self) -> _FakePage:
        return self.page

    async def close(self) -> None:
        self.closed += 1


class _FakeBrowser:
    def __init__(self, page: _FakePage) -> None:
        self.context = _FakeContext(page)
        self.context_kwargs: Dict[str, Any] = {}
        self.closed = 0

    async def new_context(self, **kwargs: Any) -> _FakeContext:
        self.context_kwargs = kwargs
        return self.context

    async def close(self) -> None:
        self.closed += 1


class _FakeBrowserType:
    def __init__(self, browser: _FakeBrowser) -> None:
        self.browser = browser
        self.launch_error: Optional[Exception] = None

    async def launch(self) -> _FakeBrowser:
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class _FakePlaywright:
    def __init__(self, page: _FakePage) -> None:
        self.browser = _FakeBrowser(page)
        self.chromium = _FakeBrowserType(self.browser)
        self.stopped = 0

    async def stop(self) -> None:
        self.stopped += 1


class _FakeStarter:
    def __init__(self, playwright: _FakePlaywright) -> None:
        self.playwright = playwright

    async def start(self) -> _FakePlaywright:
        return self.playwright


@pytest.fixture
def fake_page(monkeypatch: pytest.MonkeyPatch) -> _FakePage:
    page = _FakePage()
    playwright = _FakePlaywright(page)
    monkeypatch.setattr(session_module, "async_playwright", lambda: _FakeStarter(playwright))
    page.playwright = playwright  # type: ignore[attr-defined]
    return page


def test_session_passes_device_scale_to_context_and_closes_once(fake_page: _FakePage) -> None:
    playwright: _FakePlaywright = fake_page.playwright  # type: ignore[attr-defined]

    async def _drive() -> PlaywrightSession:
        async with PlaywrightSession(device_scale_factor=2.0) as session:
            await session.set_viewport(640, 480)
        await session.close()
        return session

    asyncio.run(_drive())

    assert playwright.browser.context_kwargs["device_scale_factor"] == 2.0
    assert ("set_viewport_size", {"width": 640, "height": 480}) in fake_page.calls
    assert playwright.browser.context.closed == 1
    assert playwright.browser.closed == 1
    assert playwright.stopped == 1


def test_load_waits_for_network_idle(fake_page: _FakePage) -> None:
    async def _drive() -> None:
        async with PlaywrightSession(load_timeout_ms=1234) as session:
            await session.load("file:///tmp/svg_preview.html")

    asyncio.run(_drive())

    name, (url, kwargs) = fake_page.calls[0]
    assert name == "goto"
    assert url == "file:///tmp/svg_preview.html"
    assert kwargs == {"wait_until": "networkidle", "timeout": 1234}


def test_load_timeout_becomes_source_error(fake_page: _FakePage) -> None:
    fake_page.goto_error = PlaywrightTimeoutError("Timeout 10ms exceeded")

    async def _drive() -> None:
        async with PlaywrightSession() as session:
            await session.load("https://example.com/a.svg")

    with pytest.raises(SourceError, match="Timed out"):
        asyncio.run(_drive())


def test_missing_selector_becomes_no_graphic_found(fake_page: _FakePage) -> None:
    fake_page.selector_error = PlaywrightTimeoutError("Timeout exceeded")

    async def _drive() -> None:
        async with PlaywrightSession() as session:
            await session.wait_for_graphic(50)

    with pytest.raises(NoGraphicFound):
        asyncio.run(_drive())


def test_wait_for_graphic_applies_layout_script(fake_page: _FakePage) -> None:
    async def _drive() -> None:
        async with PlaywrightSession() as session:
            await session.wait_for_graphic(50)

    asyncio.run(_drive())

    assert ("evaluate", (PREPARE_SCRIPT, None)) in fake_page.calls


def test_screenshot_requests_png_with_clip(fake_page: _FakePage, tmp_path: Path) -> None:
    target = tmp_path / "frame-0000.png"

    async def _drive() -> None:
        async with PlaywrightSession() as session:
            await session.screenshot(target, clip={"x": 0, "y": 0, "width": 10, "height": 20}, omit_background=True)

    asyncio.run(_drive())

    name, kwargs = fake_page.calls[-1]
    assert name == "screenshot"
    assert kwargs["path"] == str(target)
    assert kwargs["type"] == "png"
    assert kwargs["omit_background"] is True
    assert kwargs["clip"] == {"x": 0.0, "y": 0.0, "width": 10.0, "height": 20.0}


def test_initial_viewport_is_800_by_600(fake_page: _FakePage) -> None:
    playwright: _FakePlaywright = fake_page.playwright  # type: ignore[attr-defined]

    async def _drive() -> None:
        async with PlaywrightSession():
            pass

    asyncio.run(_drive())

    assert playwright.browser.context_kwargs["viewport"] == {"width": 800, "height": 600}


def test_launch_failure_becomes_capture_failure_and_stops_playwright(fake_page: _FakePage) -> None:
    playwright: _FakePlaywright = fake_page.playwright  # type: ignore[attr-defined]
    playwright.chromium.launch_error = PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")

    async def _drive() -> None:
        async with PlaywrightSession():
            pass

    with pytest.raises(CaptureFailure, match="Unable to launch chromium"):
        asyncio.run(_drive())

    assert playwright.stopped == 1
    assert playwright.browser.closed == 0


def test_script_error_becomes_capture_failure(fake_page: _FakePage) -> None:
    fake_page.evaluate_error = PlaywrightError("Execution context was destroyed")

    async def _drive() -> None:
        async with PlaywrightSession() as session:
            await session.evaluate("() => 1")

    with pytest.raises(CaptureFailure, match="Page script failed"):
        asyncio.run(_drive())
