from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from devboard.config import settings
from devboard.services.github.exceptions import (
    GithubEmptyRepositoryError,
    GithubForbiddenError,
    GithubNotFoundError,
    GithubRateLimitError,
    GithubSecondaryRateLimitError,
    GithubStatusError,
    GithubTransportError,
    GithubUnauthorizedError,
)
from devboard.services.github.models import RepositoryDescriptor
from devboard.services.github.pagination import PageFetcher, Paginator
from devboard.services.github.rate_limiter import FixedIntervalThrottle

API_PREVIEW_HEADERS = {
    "Accept": "application/vnd.github+json",
}

PUSH_EVENT = "PushEvent"

logger = logging.getLogger(__name__)


class GitHubClient:
    def __init__(
        self,
        token: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize GitHubClient.

        Args:
            token: OAuth or personal token; None makes unauthenticated calls
            api_url: GitHub API URL (defaults to api.github.com)
            timeout: Per-request timeout in seconds
            page_size: per_page used for listings
            http_client: Pre-built AsyncClient (tests, connection sharing)
        """
        self._token = token
        self._api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self._page_size = page_size or settings.GITHUB_PAGE_SIZE
        self._owns_client = http_client is None
        self._rest = http_client or httpx.AsyncClient(
            base_url=self._api_url,
            timeout=timeout or settings.GITHUB_HTTP_TIMEOUT,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self._token)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "devboard-leaderboard",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        headers.update(API_PREVIEW_HEADERS)
        return headers

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response

        status = response.status_code
        text_lower = response.text.lower()
        url = str(response.request.url) if response.request else ""

        if status in (403, 429):
            if "secondary rate limit" in text_lower:
                self._handle_secondary_rate_limit(response)
            elif (
                "rate limit" in text_lower
                or response.headers.get("X-RateLimit-Remaining") == "0"
            ):
                self._handle_rate_limit(response)

        message = f"GitHub API error {status} for {url}: {response.text[:200]}"
        if status == 401:
            raise GithubUnauthorizedError(message, status)
        if status == 404:
            raise GithubNotFoundError(message, status)
        if status == 403:
            raise GithubForbiddenError(message, status)
        if status == 409 and "empty" in text_lower:
            raise GithubEmptyRepositoryError(message, status)
        raise GithubStatusError(message, status)

    def _handle_rate_limit(self, response: httpx.Response) -> None:
        reset_header = response.headers.get("X-RateLimit-Reset")
        retry_after_header = response.headers.get("Retry-After")
        wait_seconds = 60.0

        if retry_after_header:
            try:
                wait_seconds = float(retry_after_header)
            except ValueError:
                pass
        elif reset_header:
            try:
                reset_epoch = float(reset_header)
                now_epoch = datetime.now(timezone.utc).timestamp()
                wait_seconds = max(reset_epoch - now_epoch, 1.0)
            except ValueError:
                pass

        raise GithubRateLimitError(
            "GitHub rate limit reached", retry_after=wait_seconds
        )

    def _handle_secondary_rate_limit(self, response: httpx.Response) -> None:
        """
        Handle GitHub secondary rate limit (abuse detection).

        Secondary rate limits require longer backoff (typically 60s+).
        """
        retry_after_header = response.headers.get("Retry-After")
        wait_seconds = 120.0  # Default 2 minutes for secondary

        if retry_after_header:
            try:
                wait_seconds = max(float(retry_after_header), 60.0)
            except ValueError:
                pass

        logger.warning(
            f"GitHub secondary rate limit (abuse detection) hit, "
            f"retry advised after {wait_seconds}s"
        )
        raise GithubSecondaryRateLimitError(
            "GitHub secondary rate limit (abuse detection) hit",
            retry_after=wait_seconds,
        )

    async def _get(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        try:
            response = await self._rest.get(path, headers=self._headers(), params=params)
        except httpx.RequestError as exc:
            raise GithubTransportError(f"GitHub request to {path} failed: {exc}") from exc
        return self._handle_response(response)

    @staticmethod
    def _has_next_page(response: httpx.Response) -> bool:
        link_header = response.headers.get("Link")
        if not link_header:
            return False
        for part in link_header.split(","):
            if part.strip().endswith('rel="next"'):
                return True
        return False

    def page_fetcher(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> PageFetcher:
        """Build a ``fetch(page) -> (items, has_next)`` callable for a list endpoint."""
        base_params = dict(params or {})

        async def _fetch(page: int):
            query = {**base_params, "per_page": self._page_size, "page": page}
            response = await self._get(path, params=query)
            items = response.json()
            if not isinstance(items, list):
                logger.warning("Expected a list from %s, got %s", path, type(items).__name__)
                return [], False
            return items, self._has_next_page(response)

        return _fetch

    async def get_authenticated_user(self) -> Dict[str, Any]:
        response = await self._get("/user")
        return response.json()

    async def list_user_repositories(
        self,
        username: str,
        throttle: FixedIntervalThrottle | None = None,
    ) -> List[RepositoryDescriptor]:
        """List every repository owned by ``username``."""
        fetch = self.page_fetcher(f"/users/{username}/repos", {"type": "owner"})
        repos = await Paginator(fetch, throttle=throttle).collect()
        return [RepositoryDescriptor.from_api(repo) for repo in repos]

    async def list_commits(
        self,
        repository: RepositoryDescriptor,
        author: str,
        throttle: FixedIntervalThrottle | None = None,
    ) -> List[Dict[str, Any]]:
        """List commits in ``repository`` authored by ``author``."""
        fetch = self.page_fetcher(
            f"/repos/{repository.owner}/{repository.name}/commits", {"author": author}
        )
        return await Paginator(fetch, throttle=throttle).collect()

    async def list_public_events(
        self,
        username: str,
        throttle: FixedIntervalThrottle | None = None,
        max_pages: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Recent public events for ``username``; GitHub keeps a bounded window."""
        fetch = self.page_fetcher(f"/users/{username}/events/public")
        return await Paginator(fetch, throttle=throttle, max_pages=max_pages).collect()

    async def close(self) -> None:
        if self._owns_client:
            await self._rest.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def get_github_client(token: str | None = None) -> GitHubClient:
    """
    Client for a scan: the user's own OAuth token when stored, otherwise the
    server token, otherwise unauthenticated (lowest rate limit).
    """
    token = token or settings.GITHUB_TOKEN
    if not token:
        logger.debug("No GitHub token available, using unauthenticated calls")
    return GitHubClient(token=token)
