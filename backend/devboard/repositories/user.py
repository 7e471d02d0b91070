"""User repository for leaderboard records"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase

from devboard.entities.user import UserRecord

from .base import BaseRepository

ZERO_COUNTERS = {
    "points": 0,
    "repo_count": 0,
    "commit_count": 0,
    "daily_check_ins": 0,
}


class UserRepository(BaseRepository[UserRecord]):
    """Repository for user records keyed by username"""

    def __init__(self, db: AsyncDatabase):
        super().__init__(db, "users", UserRecord)

    async def find_by_username(self, username: str) -> Optional[UserRecord]:
        return await self.find_by_id(username)

    async def find_raw(self, username: str) -> Optional[Dict[str, Any]]:
        """Return the stored document untouched, credential included."""
        return await self.collection.find_one({"_id": username})

    async def upsert_login(
        self,
        username: str,
        profile: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> UserRecord:
        """
        Write profile fields from a login.

        Counters are zeroed only when the record is first inserted, so points
        and check-ins accumulated earlier survive every later login.
        """
        now = now or datetime.now(timezone.utc)
        update = {
            "$set": {**profile, "last_login": now},
            "$setOnInsert": dict(ZERO_COUNTERS),
        }
        return await self.find_one_and_update(
            {"_id": username}, update, upsert=True
        )

    async def merge_fields(self, username: str, fields: Dict[str, Any]) -> None:
        """Merge-write: set only the given fields, creating the record if absent."""
        await self.set_fields({"_id": username}, fields, upsert=True)

    async def clear_access_token(self, username: str) -> None:
        """Forget a stored token GitHub rejected; later scans fall back to other credentials."""
        await self.set_fields({"_id": username}, {"access_token": None})

    async def increment_check_in(
        self, username: str, now: Optional[datetime] = None
    ) -> Optional[UserRecord]:
        """Atomically add one point and one check-in; None when the user does not exist."""
        now = now or datetime.now(timezone.utc)
        return await self.find_one_and_update(
            {"_id": username},
            {
                "$inc": {"points": 1, "daily_check_ins": 1},
                "$set": {"last_check_in": now},
            },
            upsert=False,
        )

    async def list_by_points(self, skip: int = 0, limit: int = 0) -> List[UserRecord]:
        """All records, highest points first."""
        return await self.find_many(
            {}, sort=[("points", DESCENDING)], skip=skip, limit=limit
        )
