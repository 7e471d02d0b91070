from .oauth_state import OAuthStateRepository
from .user import UserRepository

__all__ = [
    "OAuthStateRepository",
    "UserRepository",
]
