"""
Browser Session Manager.

Owns the Playwright driver and hands out one isolated Chromium session per
render request. The number of sessions alive at once is bounded; requests
beyond the limit queue until a slot frees up or their deadline passes.
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional, Set

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ..config import settings
from ..errors import SessionUnavailableError

logger = logging.getLogger("url2pdf.browser_pool")


class RenderSession:
    """
    One browser instance scoped to a single render request.

    Sessions are never shared between requests and close exactly once.
    """

    _ids = itertools.count(1)

    def __init__(self, browser: Browser):
        self.id = next(self._ids)
        self.browser = browser
        self._context: Optional[BrowserContext] = None
        self._closed = False

    async def new_page(
        self,
        viewport_width: int = 1920,
        viewport_height: int = 1080,
        user_agent: Optional[str] = None,
    ) -> Page:
        """
        Open a page with a fixed viewport and user agent.

        Args:
            viewport_width: Viewport width in pixels
            viewport_height: Viewport height in pixels
            user_agent: User agent string, browser default if None

        Returns:
            Page ready for navigation
        """
        self._context = await self.browser.new_context(
            viewport={"width": viewport_width, "height": viewport_height},
            user_agent=user_agent,
        )
        return await self._context.new_page()

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close the browser. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser session {self.id}: {e}")


class SessionManager:
    """
    Gates browser launches behind a semaphore.

    Each call to session() launches a fresh browser and always closes it
    when the block exits, whether it finished, raised or was cancelled.
    """

    def __init__(
        self,
        max_sessions: int = 3,
        headless: bool = True,
        launch_args: Optional[List[str]] = None,
        queue_timeout_seconds: float = 60.0,
        driver_factory: Callable = async_playwright,
    ):
        self.max_sessions = max_sessions
        self.headless = headless
        self.launch_args = list(launch_args or [])
        self.queue_timeout_seconds = queue_timeout_seconds
        self._driver_factory = driver_factory
        self._playwright: Optional[Playwright] = None
        self._semaphore = asyncio.Semaphore(max_sessions)
        self._lock = asyncio.Lock()
        self._sessions: Set[RenderSession] = set()

    async def start(self) -> None:
        """Start the Playwright driver if it is not running yet."""
        async with self._lock:
            if self._playwright is not None:
                return

            logger.info(
                f"Starting Playwright driver (max_sessions={self.max_sessions}, headless={self.headless})"
            )
            self._playwright = await self._driver_factory().start()

    async def shutdown(self) -> None:
        """Close any open sessions and stop the driver."""
        async with self._lock:
            for session in list(self._sessions):
                logger.warning(f"Closing session {session.id} left open at shutdown")
                await session.close()
            self._sessions.clear()

            if self._playwright is not None:
                logger.info("Stopping Playwright driver")
                await self._playwright.stop()
                self._playwright = None

    async def _acquire_slot(self) -> None:
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self.queue_timeout_seconds)
        except asyncio.TimeoutError:
            raise SessionUnavailableError(
                f"No browser session available within {self.queue_timeout_seconds:g}s "
                f"({self.max_sessions} sessions busy)"
            )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[RenderSession]:
        """
        Acquire a slot, launch a browser and yield it as a RenderSession.

        Raises:
            SessionUnavailableError: If no slot frees up before the deadline
        """
        await self._acquire_slot()
        try:
            await self.start()
            browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.launch_args,
            )
            session = RenderSession(browser)
            self._sessions.add(session)
            logger.debug(f"Opened browser session {session.id} ({len(self._sessions)} active)")
            try:
                yield session
            finally:
                await session.close()
                self._sessions.discard(session)
                logger.debug(f"Closed browser session {session.id} ({len(self._sessions)} active)")
        finally:
            self._semaphore.release()

    @property
    def active_sessions(self) -> int:
        """Number of browser sessions currently open."""
        return len(self._sessions)

    @property
    def is_started(self) -> bool:
        """Whether the Playwright driver is running."""
        return self._playwright is not None


# Singleton instance
session_manager = SessionManager(
    max_sessions=settings.max_concurrent_sessions,
    headless=settings.browser_headless,
    launch_args=settings.browser_launch_args,
    queue_timeout_seconds=settings.session_queue_timeout_seconds,
)
