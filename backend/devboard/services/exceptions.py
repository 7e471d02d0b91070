"""Domain exceptions raised by the service layer."""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for service failures."""


class UserNotFoundError(ServiceError):
    """Raised when an operation needs an existing user record."""

    def __init__(self, username: str, message: str | None = None):
        super().__init__(message or f"User {username} not found")
        self.username = username


class ScanTimeoutError(ServiceError):
    """Raised when a full scan exceeds its configured time bound."""

    def __init__(self, username: str, timeout: float):
        super().__init__(f"Scan for {username} exceeded {timeout:g}s")
        self.username = username
        self.timeout = timeout
