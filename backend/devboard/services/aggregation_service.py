"""
Aggregation of a GitHub user's public activity.

Full mode lists every repository and counts authored commits in each one,
strictly sequentially with a fixed delay between repositories. Quick mode
skips per-repository counting and estimates commits from push events in the
recent public event feed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from devboard.config import settings
from devboard.services.github.commit_counter import CommitCounter
from devboard.services.github.github_client import PUSH_EVENT, GitHubClient
from devboard.services.github.rate_limiter import FixedIntervalThrottle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationResult:
    repo_count: int
    commit_count: int


class AggregationService:
    def __init__(
        self,
        client: GitHubClient,
        pagination_delay: float | None = None,
        commit_delay: float | None = None,
        quick_delay: float | None = None,
        event_pages: int | None = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._client = client
        self._pagination_delay = (
            settings.PAGINATION_DELAY_SECONDS if pagination_delay is None else pagination_delay
        )
        self._commit_delay = (
            settings.COMMIT_FETCH_DELAY_SECONDS if commit_delay is None else commit_delay
        )
        self._quick_delay = (
            settings.QUICK_SCAN_DELAY_SECONDS if quick_delay is None else quick_delay
        )
        self._event_pages = settings.QUICK_SCAN_EVENT_PAGES if event_pages is None else event_pages
        self._sleep = sleep

    async def full_scan(self, username: str) -> AggregationResult:
        """List all repositories, then sum authored commits across them."""
        page_throttle = FixedIntervalThrottle(self._pagination_delay, sleep=self._sleep)
        repositories = await self._client.list_user_repositories(
            username, throttle=page_throttle
        )

        counter = CommitCounter(
            self._client, page_delay=self._pagination_delay, sleep=self._sleep
        )
        repo_throttle = FixedIntervalThrottle(
            self._commit_delay, sleep=self._sleep, immediate_first=False
        )
        commit_count = 0
        for repository in repositories:
            await repo_throttle.wait()
            commit_count += await counter.count(repository, username)

        logger.info(
            "Full scan for %s: %d repositories, %d commits",
            username,
            len(repositories),
            commit_count,
        )
        return AggregationResult(repo_count=len(repositories), commit_count=commit_count)

    async def quick_scan(self, username: str) -> AggregationResult:
        """Count repositories and push events from the bounded public feed."""
        throttle = FixedIntervalThrottle(self._quick_delay, sleep=self._sleep)
        repositories = await self._client.list_user_repositories(username, throttle=throttle)
        events = await self._client.list_public_events(
            username, throttle=throttle, max_pages=self._event_pages
        )
        push_events = sum(1 for event in events if event.get("type") == PUSH_EVENT)

        logger.info(
            "Quick scan for %s: %d repositories, %d push events",
            username,
            len(repositories),
            push_events,
        )
        return AggregationResult(repo_count=len(repositories), commit_count=push_events)
