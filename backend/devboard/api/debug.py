"""Operational lookup of raw user records; disabled unless ENABLE_DEBUG_ROUTES is set."""

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.asynchronous.database import AsyncDatabase

from devboard.config import settings
from devboard.database.mongo import get_db
from devboard.dtos import DebugUserResponse
from devboard.services import user_service

router = APIRouter(prefix="/debug", tags=["Debug"])


def require_debug_routes() -> None:
    if not settings.ENABLE_DEBUG_ROUTES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


@router.get(
    "/user/{username}",
    response_model=DebugUserResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_debug_routes)],
)
async def debug_user(username: str, db: AsyncDatabase = Depends(get_db)):
    document = await user_service.get_raw_user(db, username)
    if document is None:
        return DebugUserResponse(exists=False, message="User not found in database")
    return DebugUserResponse(exists=True, data=document)
