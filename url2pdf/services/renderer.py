"""
PDF Renderer Service.

Handles page navigation, settle waiting and PDF export using one
Playwright browser session per call.
"""

import logging
import time
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from ..config import settings
from ..errors import RenderError
from ..models import PdfResult, RenderOptions
from .browser_pool import SessionManager, session_manager

logger = logging.getLogger("url2pdf.renderer")

# Resolves once the document, its web fonts and every <img> have finished loading
SETTLE_PREDICATE = """() => {
    if (document.readyState !== 'complete') return false;
    if (document.fonts && document.fonts.status !== 'loaded') return false;
    return Array.from(document.images).every((img) => img.complete);
}"""


async def wait_for_settle(page: Page, strategy: str, delay_ms: int) -> None:
    """
    Give deferred content a chance to finish before export.

    Args:
        page: Page that has finished navigating
        strategy: "event" to wait on page signals, "fixed" to sleep
        delay_ms: Upper bound of the event wait, or the sleep length
    """
    if strategy == "fixed":
        await page.wait_for_timeout(delay_ms)
        return

    try:
        await page.wait_for_function(SETTLE_PREDICATE, timeout=delay_ms)
    except PlaywrightTimeout:
        logger.debug(f"Page did not report settled within {delay_ms}ms, exporting anyway")


async def render_pdf(
    url: str,
    options: Optional[RenderOptions] = None,
    manager: Optional[SessionManager] = None,
) -> PdfResult:
    """
    Render a URL to PDF.

    This function:
    1. Acquires a fresh browser session
    2. Opens a page with a fixed viewport and user agent
    3. Navigates to the URL and waits for network idle
    4. Waits for the page to settle
    5. Exports the page to PDF with defaults merged with the caller's options
    6. Closes the session on every exit path

    Args:
        url: Absolute URL to render
        options: PDF export overrides, service defaults if None
        manager: Session manager to draw the browser from

    Returns:
        PdfResult with the PDF bytes

    Raises:
        RenderError: If any step fails
    """
    manager = manager or session_manager
    pdf_options = (options or RenderOptions()).merged_with_defaults()
    start_time = time.time()

    try:
        async with manager.session() as session:
            page = await session.new_page(
                viewport_width=settings.viewport_width,
                viewport_height=settings.viewport_height,
                user_agent=settings.user_agent,
            )

            logger.info(f"Navigating to {url} (session {session.id})")

            try:
                response = await page.goto(
                    url,
                    timeout=settings.navigation_timeout_ms,
                    wait_until="networkidle",
                )
            except PlaywrightTimeout:
                raise RenderError(
                    f"Navigation timeout of {settings.navigation_timeout_ms} ms exceeded: {url}"
                )

            if response is not None and response.status >= 400:
                logger.warning(f"HTTP {response.status} for {url}, rendering error page")

            await wait_for_settle(page, settings.settle_strategy, settings.settle_delay_ms)

            final_url = page.url
            pdf_bytes = await page.pdf(**pdf_options)

    except RenderError:
        raise
    except PlaywrightError as e:
        raise RenderError(str(e))
    except Exception as e:
        logger.exception(f"Error rendering {url}")
        raise RenderError(f"Failed to render {url}: {e}")

    render_time_ms = int((time.time() - start_time) * 1000)
    logger.info(f"Rendered {url} in {render_time_ms}ms: {len(pdf_bytes)} bytes")

    return PdfResult(
        content=pdf_bytes,
        size_bytes=len(pdf_bytes),
        final_url=final_url,
        render_time_ms=render_time_ms,
    )
