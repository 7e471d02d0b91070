"""
Process-wide self-ping.

Some hosts idle a service that receives no traffic; pinging its own URL keeps
it warm. Exactly one task exists per process, started from the application
startup hook.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class KeepAlivePinger:
    def __init__(
        self,
        url: str,
        interval: float,
        http_client: httpx.AsyncClient | None = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._url = url
        self._interval = interval
        self._http_client = http_client
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the ping loop; a second call while running does nothing."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="keepalive-pinger")
        logger.info("Keep-alive pinging %s every %ss", self._url, self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def ping_once(self) -> bool:
        client = self._http_client or httpx.AsyncClient(timeout=10)
        try:
            response = await client.get(self._url)
            logger.debug("Keep-alive ping %s -> %s", self._url, response.status_code)
            return response.is_success
        except httpx.HTTPError as exc:
            logger.warning("Keep-alive ping to %s failed: %s", self._url, exc)
            return False
        finally:
            if self._http_client is None:
                await client.aclose()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.ping_once()


_pinger: Optional[KeepAlivePinger] = None


def start_keepalive(url: str | None, interval: float) -> Optional[KeepAlivePinger]:
    """Start the singleton pinger when a URL is configured."""
    global _pinger
    if not url:
        return None
    if _pinger is None:
        _pinger = KeepAlivePinger(url, interval)
    _pinger.start()
    return _pinger


async def stop_keepalive() -> None:
    global _pinger
    if _pinger is not None:
        await _pinger.stop()
        _pinger = None
