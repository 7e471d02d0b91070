"""Liveness endpoints."""

import logging

from fastapi import APIRouter, Depends
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from devboard.config import settings
from devboard.database.mongo import get_db
from devboard.dtos import HealthResponse, RootResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/", response_model=RootResponse)
async def root():
    """Liveness probe."""
    return RootResponse(message=f"{settings.APP_NAME} is running", version=settings.APP_VERSION)


@router.get("/api/health", response_model=HealthResponse)
async def health(db: AsyncDatabase = Depends(get_db)):
    """Liveness plus a round-trip to the store."""
    database = "ok"
    try:
        await db.command("ping")
    except PyMongoError as exc:
        logger.warning("Health check database ping failed: %s", exc)
        database = str(exc)
    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        version=settings.APP_VERSION,
    )
