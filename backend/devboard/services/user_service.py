"""User record service: login upsert, check-in, leaderboard"""

import logging
from typing import Any, Dict, List, Optional

from pymongo.asynchronous.database import AsyncDatabase

from devboard.entities.user import UserRecord
from devboard.repositories.user import UserRepository
from devboard.services.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)

CHECK_IN_NOT_FOUND_MESSAGE = "User not found. Please login with GitHub first."


async def record_login(
    db: AsyncDatabase,
    *,
    username: str,
    github_id: str,
    display_name: Optional[str],
    avatar_url: Optional[str],
    access_token: Optional[str],
) -> UserRecord:
    """Create the record on first login, otherwise refresh its profile fields"""
    profile = {
        "github_id": github_id,
        "display_name": display_name or username,
        "avatar_url": avatar_url,
        "access_token": access_token,
    }
    user = await UserRepository(db).upsert_login(username, profile)
    logger.info("Recorded login for %s", username)
    return user


async def check_in(db: AsyncDatabase, username: str) -> UserRecord:
    """
    Add one point and one daily check-in.

    The increment is a single atomic update, so the returned points reflect
    this call's own increment even when check-ins race.
    """
    user = await UserRepository(db).increment_check_in(username)
    if user is None:
        raise UserNotFoundError(username, CHECK_IN_NOT_FOUND_MESSAGE)
    return user


async def get_leaderboard(
    db: AsyncDatabase, skip: int = 0, limit: int = 0
) -> List[UserRecord]:
    return await UserRepository(db).list_by_points(skip=skip, limit=limit)


async def get_raw_user(db: AsyncDatabase, username: str) -> Optional[Dict[str, Any]]:
    return await UserRepository(db).find_raw(username)
