from typing import List

from fastapi import APIRouter, Depends, Query
from pymongo.asynchronous.database import AsyncDatabase

from devboard.database.mongo import get_db
from devboard.dtos import LeaderboardEntry
from devboard.services import user_service

router = APIRouter(tags=["Leaderboard"])


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    skip: int = Query(0, ge=0),
    limit: int = Query(0, ge=0, le=1000, description="0 returns every record"),
    db: AsyncDatabase = Depends(get_db),
):
    """Users sorted by points, highest first."""
    users = await user_service.get_leaderboard(db, skip=skip, limit=limit)
    return [LeaderboardEntry.from_record(user) for user in users]
