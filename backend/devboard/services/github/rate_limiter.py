"""
Fixed-interval throttle for sequential GitHub calls.

Each scan owns its own throttle instances, so waiting only delays the chain
of calls issued by that scan and never other requests running concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class FixedIntervalThrottle:
    """
    Static sleep between successive calls.

    With ``immediate_first`` (the default) the first ``wait()`` returns at
    once and every later one sleeps ``interval`` seconds; otherwise every
    call sleeps.
    """

    def __init__(
        self,
        interval: float,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        immediate_first: bool = True,
    ):
        """
        Initialize throttle.

        Args:
            interval: Seconds slept before a throttled call (0 disables)
            sleep: Awaitable sleep function, injectable for tests
            immediate_first: Let the first call through without sleeping
        """
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._interval = interval
        self._sleep = sleep or asyncio.sleep
        self._immediate_first = immediate_first
        self._calls = 0

    @property
    def interval(self) -> float:
        return self._interval

    async def wait(self) -> float:
        """
        Wait if necessary before the next call.

        Returns:
            The time waited in seconds.
        """
        self._calls += 1
        if self._interval == 0 or (self._immediate_first and self._calls == 1):
            return 0.0
        await self._sleep(self._interval)
        return self._interval

    def reset(self) -> None:
        """Restore the initial state."""
        self._calls = 0
