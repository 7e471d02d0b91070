"""Exceptions raised by the GitHub client."""

from __future__ import annotations


class GithubError(Exception):
    """Base exception for GitHub API failures."""


class GithubRateLimitError(GithubError):
    """Raised when the upstream service enforces a rate limit."""

    def __init__(self, message: str, retry_after: int | float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class GithubSecondaryRateLimitError(GithubRateLimitError):
    """
    Raised when GitHub's secondary rate limit (abuse detection) is triggered.

    Secondary rate limits are triggered by bursts of requests in a short
    window and usually ask for a longer backoff (60s+) than primary limits.
    """

    pass


class GithubStatusError(GithubError):
    """Raised for a non-2xx response; carries the HTTP status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class GithubUnauthorizedError(GithubStatusError):
    """401 - the token was revoked or has expired."""


class GithubNotFoundError(GithubStatusError):
    """404 - the user or repository does not exist or is hidden."""


class GithubForbiddenError(GithubStatusError):
    """403 that is not a rate limit (e.g. access blocked)."""


class GithubEmptyRepositoryError(GithubStatusError):
    """409 - the repository has no commits yet."""


class GithubTransportError(GithubError):
    """Raised when the request never produced a response (DNS, timeout, reset)."""


class GithubOAuthError(GithubError):
    """Raised when the OAuth handshake cannot be completed."""
