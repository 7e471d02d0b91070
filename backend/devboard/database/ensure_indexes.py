"""Database index management for MongoDB collections."""

import logging

from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure

logger = logging.getLogger(__name__)


async def ensure_indexes(db: AsyncDatabase) -> None:
    """
    Ensure all required indexes exist.

    Called on application startup so the leaderboard sort and OAuth state
    lookups never fall back to collection scans.
    """
    await _ensure_users_indexes(db)
    await _ensure_oauth_states_indexes(db)
    logger.info("Database indexes ensured successfully")


async def _ensure_users_indexes(db: AsyncDatabase) -> None:
    """Create indexes for users collection."""
    collection = db.users

    # Leaderboard ordering
    try:
        await collection.create_index(
            [("points", DESCENDING)],
            name="points_desc_idx",
        )
        logger.debug("Created index: points_desc_idx")
    except OperationFailure as e:
        if "already exists" not in str(e):
            logger.warning(f"Failed to create points_desc_idx index: {e}")


async def _ensure_oauth_states_indexes(db: AsyncDatabase) -> None:
    """Create indexes for oauth_states collection."""
    collection = db.oauth_states

    try:
        await collection.create_index(
            [("state", 1)],
            unique=True,
            name="oauth_state_unique",
        )
        logger.debug("Created index: oauth_state_unique")
    except OperationFailure as e:
        if "already exists" not in str(e):
            logger.warning(f"Failed to create oauth_state_unique index: {e}")
