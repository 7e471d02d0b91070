from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OAuthState(BaseModel):
    """Single-use CSRF state issued when an OAuth redirect begins."""

    id: Optional[object] = Field(None, alias="_id")
    state: str
    provider: str = "github"
    created_at: datetime
    used: bool = False
    used_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)
