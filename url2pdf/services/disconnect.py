"""
Client disconnect handling.

Runs a render while watching the HTTP connection, so a client that goes
away cancels its render and frees the browser session early.
"""

import asyncio
import logging
from typing import Awaitable, TypeVar

from starlette.requests import Request

from ..errors import ClientDisconnectedError

logger = logging.getLogger("url2pdf.disconnect")

T = TypeVar("T")


async def run_until_disconnected(
    request: Request,
    awaitable: Awaitable[T],
    poll_interval: float = 0.5,
) -> T:
    """
    Await a coroutine, cancelling it if the client disconnects first.

    Args:
        request: Incoming request whose connection is watched
        awaitable: Work to run, typically render_pdf(...)
        poll_interval: Seconds between disconnect checks

    Returns:
        The awaitable's result

    Raises:
        ClientDisconnectedError: If the client went away before completion
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(f"Client disconnected from {request.url.path}, cancelling render")
                task.cancel()
                # Let the task run its cleanup before reporting
                await asyncio.wait({task})
                raise ClientDisconnectedError("Client disconnected before the PDF was ready")
    finally:
        if not task.done():
            task.cancel()
