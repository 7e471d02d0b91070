"""Data Transfer Objects (DTOs) for API requests and responses"""

from .health import HealthResponse, RootResponse
from .points import (
    CheckInResponse,
    DebugUserResponse,
    LeaderboardEntry,
    PointsResponse,
)

__all__ = [
    "CheckInResponse",
    "DebugUserResponse",
    "HealthResponse",
    "LeaderboardEntry",
    "PointsResponse",
    "RootResponse",
]
