from .commit_counter import CommitCounter
from .github_client import GitHubClient, get_github_client
from .github_oauth import (
    build_authorize_url,
    create_oauth_state,
    exchange_code_for_token,
)
from .models import RepositoryDescriptor
from .pagination import Paginator, paginate
from .rate_limiter import FixedIntervalThrottle

__all__ = [
    "CommitCounter",
    "FixedIntervalThrottle",
    "GitHubClient",
    "Paginator",
    "RepositoryDescriptor",
    "build_authorize_url",
    "create_oauth_state",
    "exchange_code_for_token",
    "get_github_client",
    "paginate",
]
