from .oauth_state import OAuthState
from .user import UserRecord

__all__ = [
    "OAuthState",
    "UserRecord",
]
