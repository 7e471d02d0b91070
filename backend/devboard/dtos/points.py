"""Scan, check-in and leaderboard DTOs"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from devboard.entities.user import UserRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PointsResponse(CamelModel):
    username: str
    repo_count: int
    commit_count: int
    points: int
    message: str


class CheckInResponse(CamelModel):
    success: bool = True
    message: str
    new_points: int


class LeaderboardEntry(CamelModel):
    """Public projection of a user record; never carries the access token."""

    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    points: int = 0
    repo_count: int = 0
    commit_count: int = 0
    daily_check_ins: int = 0
    last_login: Optional[datetime] = None
    last_updated: Optional[datetime] = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "LeaderboardEntry":
        return cls(
            id=user.username,
            username=user.username,
            display_name=user.display_name or user.username,
            avatar_url=user.avatar_url,
            points=user.points,
            repo_count=user.repo_count,
            commit_count=user.commit_count,
            daily_check_ins=user.daily_check_ins,
            last_login=user.last_login,
            last_updated=user.last_updated,
        )


class DebugUserResponse(BaseModel):
    exists: bool
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
