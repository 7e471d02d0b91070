"""Generic page-following fetcher for GitHub list endpoints."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from devboard.services.github.rate_limiter import FixedIntervalThrottle

logger = logging.getLogger(__name__)

T = TypeVar("T")

# fetch(page) -> (items on that page, whether upstream advertises a next page)
PageFetcher = Callable[[int], Awaitable[Tuple[Sequence[T], bool]]]


class Paginator(Generic[T]):
    """
    Follow a paged listing until it is exhausted.

    Stops when a page comes back empty or upstream signals there is no next
    page. The throttle is awaited before every fetch; a fresh throttle lets
    the first one through at once. Errors raised by ``fetch`` propagate
    unchanged.
    """

    def __init__(
        self,
        fetch: PageFetcher,
        throttle: Optional[FixedIntervalThrottle] = None,
        max_pages: Optional[int] = None,
        first_page: int = 1,
    ):
        self._fetch = fetch
        self._throttle = throttle
        self._max_pages = max_pages
        self._first_page = first_page

    async def collect(self) -> List[T]:
        items: List[T] = []
        page = self._first_page
        fetched = 0
        while True:
            if self._max_pages is not None and fetched >= self._max_pages:
                break
            if self._throttle is not None:
                await self._throttle.wait()

            page_items, has_next = await self._fetch(page)
            fetched += 1
            if not page_items:
                break
            items.extend(page_items)
            if not has_next:
                break
            page += 1

        logger.debug("Paginated %d items over %d pages", len(items), fetched)
        return items


async def paginate(
    fetch: PageFetcher,
    throttle: Optional[FixedIntervalThrottle] = None,
    max_pages: Optional[int] = None,
) -> List[T]:
    """Shorthand for ``Paginator(fetch, throttle, max_pages).collect()``."""
    return await Paginator(fetch, throttle=throttle, max_pages=max_pages).collect()
