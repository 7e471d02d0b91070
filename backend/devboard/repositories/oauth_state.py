"""OAuth state repository for the login handshake"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pymongo.asynchronous.database import AsyncDatabase

from devboard.entities.oauth_state import OAuthState

from .base import BaseRepository


class OAuthStateRepository(BaseRepository[OAuthState]):
    """Repository for single-use OAuth state tokens"""

    def __init__(self, db: AsyncDatabase):
        super().__init__(db, "oauth_states", OAuthState)

    async def create_state(self, provider: str = "github") -> OAuthState:
        document = {
            "state": uuid.uuid4().hex,
            "provider": provider,
            "created_at": datetime.now(timezone.utc),
            "used": False,
            "used_at": None,
        }
        return await self.insert_one(document)

    async def consume_state(self, state: str, provider: str = "github") -> Optional[OAuthState]:
        """Mark an unused state as used; None when unknown or already consumed."""
        return await self.find_one_and_update(
            {"state": state, "provider": provider, "used": False},
            {"$set": {"used": True, "used_at": datetime.now(timezone.utc)}},
            return_updated=False,
        )
