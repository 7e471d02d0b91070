"""Scan orchestration: aggregate, score, and merge into the user record."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from pymongo.asynchronous.database import AsyncDatabase

from devboard.config import settings
from devboard.repositories.user import UserRepository
from devboard.services.aggregation_service import AggregationResult, AggregationService
from devboard.services.exceptions import ScanTimeoutError
from devboard.services.github.exceptions import GithubUnauthorizedError
from devboard.services.github.github_client import GitHubClient, get_github_client
from devboard.services.scoring import ScanMode, score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOutcome:
    username: str
    mode: ScanMode
    result: AggregationResult
    points: int


def build_merge_payload(
    result: AggregationResult,
    points: int,
    mode: ScanMode,
    now: datetime | None = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "repo_count": result.repo_count,
        "commit_count": result.commit_count,
        "points": points,
        "last_updated": now,
    }
    if mode == ScanMode.FULL:
        payload["last_full_scan"] = now
    return payload


async def merge_scan_result(
    users: UserRepository,
    username: str,
    result: AggregationResult,
    points: int,
    mode: ScanMode = ScanMode.FULL,
) -> Dict[str, Any]:
    """
    Merge-write the scan snapshot into the user record.

    Only the snapshot fields are written; check-ins, tokens and profile
    fields are left as they are. A missing record is created holding just
    these fields until the user logs in.
    """
    payload = build_merge_payload(result, points, mode)
    await users.merge_fields(username, payload)
    return payload


class PointsService:
    def __init__(
        self,
        db: AsyncDatabase,
        client_factory: Callable[[Optional[str]], GitHubClient] = get_github_client,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        timeout: float | None = None,
    ):
        self.db = db
        self.users = UserRepository(db)
        self._client_factory = client_factory
        self._sleep = sleep
        self._timeout = settings.FULL_SCAN_TIMEOUT_SECONDS if timeout is None else timeout

    async def _stored_token(self, username: str) -> Optional[str]:
        user = await self.users.find_by_username(username)
        return user.access_token if user else None

    async def _aggregate(
        self, username: str, scan: Callable[[AggregationService], Awaitable[AggregationResult]]
    ) -> AggregationResult:
        """
        Run ``scan`` with the user's stored token when there is one.

        A 401 means the stored token was revoked: it is cleared so the next
        scan uses the server token or unauthenticated calls, and the error
        still fails this request.
        """
        token = await self._stored_token(username)
        try:
            async with self._client_factory(token) as client:
                return await scan(AggregationService(client, sleep=self._sleep))
        except GithubUnauthorizedError:
            if token:
                logger.warning("Stored GitHub token for %s was rejected, clearing it", username)
                await self.users.clear_access_token(username)
            raise

    async def run_full_scan(self, username: str) -> ScanOutcome:
        """Full aggregation, full-mode points, then merge into the record."""

        async def _full(aggregator: AggregationService) -> AggregationResult:
            if not self._timeout:
                return await aggregator.full_scan(username)
            try:
                return await asyncio.wait_for(
                    aggregator.full_scan(username), timeout=self._timeout
                )
            except asyncio.TimeoutError as exc:
                raise ScanTimeoutError(username, self._timeout) from exc

        result = await self._aggregate(username, _full)

        points = score(ScanMode.FULL, result.repo_count, result.commit_count)
        await merge_scan_result(self.users, username, result, points, ScanMode.FULL)
        return ScanOutcome(username=username, mode=ScanMode.FULL, result=result, points=points)

    async def run_quick_scan(self, username: str) -> ScanOutcome:
        """Event-feed estimate with quick-mode points; nothing is persisted."""
        result = await self._aggregate(
            username, lambda aggregator: aggregator.quick_scan(username)
        )

        points = score(ScanMode.QUICK, result.repo_count, result.commit_count)
        return ScanOutcome(username=username, mode=ScanMode.QUICK, result=result, points=points)
