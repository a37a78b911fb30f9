import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from url2pdf.errors import ClientDisconnectedError, RenderError
from url2pdf.services.disconnect import run_until_disconnected
from url2pdf.services.renderer import render_pdf


def make_request(disconnected: bool) -> MagicMock:
    request = MagicMock()
    request.url.path = "/generate-pdf"
    request.is_disconnected = AsyncMock(return_value=disconnected)
    return request


@pytest.mark.asyncio
async def test_returns_result_when_client_stays():
    async def work():
        await asyncio.sleep(0.02)
        return "done"

    request = make_request(disconnected=False)

    assert await run_until_disconnected(request, work(), poll_interval=0.005) == "done"
    assert request.is_disconnected.await_count >= 1


@pytest.mark.asyncio
async def test_errors_from_work_propagate():
    async def work():
        raise RenderError("navigation failed")

    with pytest.raises(RenderError, match="navigation failed"):
        await run_until_disconnected(make_request(disconnected=False), work(), poll_interval=0.005)


@pytest.mark.asyncio
async def test_disconnect_cancels_work():
    cancelled = asyncio.Event()

    async def work():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(ClientDisconnectedError):
        await run_until_disconnected(make_request(disconnected=True), work(), poll_interval=0.005)

    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_disconnect_releases_browser_session(manager, engine, fast_settle):
    engine.pdf_gate = asyncio.Event()

    with pytest.raises(ClientDisconnectedError):
        await run_until_disconnected(
            make_request(disconnected=True),
            render_pdf("https://slow.example", manager=manager),
            poll_interval=0.01,
        )

    assert engine.browsers[0].close_count == 1
    assert manager.active_sessions == 0
