"""User record - the persisted leaderboard entry, keyed by GitHub username"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """User document stored in MongoDB (``_id`` is the username)."""

    username: str = Field(..., alias="_id")
    github_id: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    access_token: Optional[str] = None

    # Counters are always present once a record exists
    points: int = Field(default=0, ge=0)
    repo_count: int = Field(default=0, ge=0)
    commit_count: int = Field(default=0, ge=0)
    daily_check_ins: int = Field(default=0, ge=0)

    last_login: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    last_check_in: Optional[datetime] = None
    last_full_scan: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_complete(self) -> bool:
        """A record created by a scan has no profile until the user logs in."""
        return self.github_id is not None
