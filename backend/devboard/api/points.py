"""Scan and check-in endpoints."""

from fastapi import APIRouter, Depends, Path
from pymongo.asynchronous.database import AsyncDatabase

from devboard.database.mongo import get_db
from devboard.dtos import CheckInResponse, PointsResponse
from devboard.services import user_service
from devboard.services.points_service import PointsService

router = APIRouter(tags=["Points"])

# GitHub logins: alphanumerics and single hyphens, at most 39 characters
USERNAME_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$"

CHECK_IN_MESSAGE = "Daily check-in successful! +1 point"


def get_points_service(db: AsyncDatabase = Depends(get_db)) -> PointsService:
    return PointsService(db)


@router.get("/points/{username}", response_model=PointsResponse)
async def calculate_points(
    username: str = Path(..., pattern=USERNAME_PATTERN),
    service: PointsService = Depends(get_points_service),
):
    """Full scan: every repository's authored commits, scored and saved."""
    outcome = await service.run_full_scan(username)
    return PointsResponse(
        username=username,
        repo_count=outcome.result.repo_count,
        commit_count=outcome.result.commit_count,
        points=outcome.points,
        message=(
            f"Full scan complete: {outcome.result.repo_count} repositories, "
            f"{outcome.result.commit_count} commits"
        ),
    )


@router.get("/quick-scan/{username}", response_model=PointsResponse)
async def quick_scan(
    username: str = Path(..., pattern=USERNAME_PATTERN),
    service: PointsService = Depends(get_points_service),
):
    """Quick estimate from the public event feed; not saved."""
    outcome = await service.run_quick_scan(username)
    return PointsResponse(
        username=username,
        repo_count=outcome.result.repo_count,
        commit_count=outcome.result.commit_count,
        points=outcome.points,
        message="Quick scan estimate from recent public push events (not saved)",
    )


@router.post("/checkin/{username}", response_model=CheckInResponse)
async def check_in(
    username: str = Path(..., pattern=USERNAME_PATTERN),
    db: AsyncDatabase = Depends(get_db),
):
    user = await user_service.check_in(db, username)
    return CheckInResponse(message=CHECK_IN_MESSAGE, new_points=user.points)
