"""Per-repository authored commit counting with fault tolerance."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from devboard.services.github.exceptions import (
    GithubEmptyRepositoryError,
    GithubError,
    GithubForbiddenError,
    GithubNotFoundError,
    GithubRateLimitError,
)
from devboard.services.github.github_client import GitHubClient
from devboard.services.github.models import RepositoryDescriptor
from devboard.services.github.rate_limiter import FixedIntervalThrottle

logger = logging.getLogger(__name__)


class CommitCounter:
    """
    Count commits by one author in one repository.

    Any failure for a single repository counts as zero so that a handful of
    unreachable repositories never fails a whole scan.
    """

    def __init__(
        self,
        client: GitHubClient,
        page_delay: float = 0.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self._client = client
        self._page_delay = page_delay
        self._sleep = sleep

    async def count(self, repository: RepositoryDescriptor, author: str) -> int:
        throttle = FixedIntervalThrottle(self._page_delay, sleep=self._sleep)
        try:
            commits = await self._client.list_commits(repository, author, throttle=throttle)
        except GithubEmptyRepositoryError:
            logger.info("Repository %s is empty, counting 0 commits", repository.full_name)
            return 0
        except (GithubNotFoundError, GithubForbiddenError) as exc:
            logger.warning(
                "Repository %s not accessible (%s), counting 0 commits",
                repository.full_name,
                exc.status_code,
            )
            return 0
        except GithubRateLimitError as exc:
            logger.warning(
                "Rate limited while counting commits in %s (retry after %ss), counting 0",
                repository.full_name,
                exc.retry_after,
            )
            return 0
        except GithubError as exc:
            logger.warning(
                "Failed to count commits in %s: %s, counting 0",
                repository.full_name,
                exc,
            )
            return 0

        return len(commits)
