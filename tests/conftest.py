"""
Shared fixtures.

The Playwright driver is replaced by small in-memory fakes so the tests
never launch a real browser.
"""

import asyncio
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from url2pdf.config import settings
from url2pdf.services.browser_pool import SessionManager


class FakeResponse:
    def __init__(self, status: int):
        self.status = status


class FakePage:
    def __init__(self, engine: "FakeEngine", browser: "FakeBrowser"):
        self.engine = engine
        self.browser = browser
        self.url = "about:blank"
        self.goto_calls: List[dict] = []
        self.pdf_calls: List[dict] = []
        self.waits: List[tuple] = []

    async def goto(self, url, timeout=None, wait_until=None):
        self.goto_calls.append({"url": url, "timeout": timeout, "wait_until": wait_until})
        if self.engine.goto_error is not None:
            raise self.engine.goto_error
        self.url = url
        return FakeResponse(self.engine.status)

    async def wait_for_function(self, expression, timeout=None):
        self.waits.append(("function", timeout))
        if self.engine.settle_error is not None:
            raise self.engine.settle_error

    async def wait_for_timeout(self, timeout):
        self.waits.append(("timeout", timeout))

    async def pdf(self, **kwargs):
        self.pdf_calls.append(kwargs)
        if self.engine.pdf_gate is not None:
            await self.engine.pdf_gate.wait()
        if self.engine.pdf_error is not None:
            raise self.engine.pdf_error
        return b"%PDF-1.4 " + self.url.encode()


class FakeContext:
    def __init__(self, engine: "FakeEngine", browser: "FakeBrowser"):
        self.engine = engine
        self.browser = browser

    async def new_page(self):
        page = FakePage(self.engine, self.browser)
        self.browser.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine
        self.pages: List[FakePage] = []
        self.contexts: List[dict] = []
        self.close_count = 0

    async def new_context(self, viewport=None, user_agent=None):
        self.contexts.append({"viewport": viewport, "user_agent": user_agent})
        return FakeContext(self.engine, self)

    async def close(self):
        self.close_count += 1


class FakeChromium:
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine

    async def launch(self, headless=True, args=None):
        self.engine.launch_calls.append({"headless": headless, "args": args})
        if self.engine.launch_error is not None:
            raise self.engine.launch_error
        browser = FakeBrowser(self.engine)
        self.engine.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, engine: "FakeEngine"):
        self.chromium = FakeChromium(engine)
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeEngine:
    """Knobs and call records for the fake Playwright stack."""

    def __init__(self):
        self.browsers: List[FakeBrowser] = []
        self.launch_calls: List[dict] = []
        self.driver_starts = 0
        self.status = 200
        self.launch_error: Optional[Exception] = None
        self.goto_error: Optional[Exception] = None
        self.settle_error: Optional[Exception] = None
        self.pdf_error: Optional[Exception] = None
        self.pdf_gate: Optional[asyncio.Event] = None
        self.playwright = FakePlaywright(self)

    def driver_factory(self):
        engine = self

        class _Driver:
            async def start(self):
                engine.driver_starts += 1
                return engine.playwright

        return _Driver()

    @property
    def pages(self) -> List[FakePage]:
        return [page for browser in self.browsers for page in browser.pages]


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def manager(engine) -> SessionManager:
    return SessionManager(
        max_sessions=3,
        headless=True,
        launch_args=["--no-sandbox", "--disable-gpu"],
        queue_timeout_seconds=1.0,
        driver_factory=engine.driver_factory,
    )


@pytest.fixture
def fast_settle(monkeypatch):
    monkeypatch.setattr(settings, "settle_delay_ms", 10, raising=True)
    monkeypatch.setattr(settings, "settle_strategy", "event", raising=True)


@pytest.fixture
def render_mock(monkeypatch) -> AsyncMock:
    """Replace render_pdf in the PDF router."""
    mock = AsyncMock()
    monkeypatch.setattr("url2pdf.api.v1.routers.pdf.render_pdf", mock)
    return mock


@pytest.fixture
def client() -> TestClient:
    # Not entered as a context manager, so the lifespan never starts a real driver
    from url2pdf.main import app
    return TestClient(app, raise_server_exceptions=False)
