"""Custom exception types for PR Neko."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional


class PRNekoError(Exception):
    """Base exception for all recoverable PR Neko errors."""


class ConfigurationError(PRNekoError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(PRNekoError):
    """Raised when GitHub credentials are unavailable."""


class StorageError(PRNekoError):
    """Raised when the persisted watchlist cannot be read or written."""


class GitHubError(PRNekoError):
    """Raised when the GitHub data source fails or returns an unexpected response.

    ``retryable`` tells callers whether the same request may succeed later
    without user intervention.
    """

    retryable = True
    default_message = "GitHub request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class UnauthorizedError(GitHubError):
    """HTTP 401: the token is invalid or expired."""

    retryable = False
    default_message = "Invalid or expired token (401)"


class ForbiddenError(GitHubError):
    """HTTP 403 without rate-limit exhaustion, usually missing token scopes."""

    retryable = False
    default_message = "Access denied - check token scopes (403)"


class RateLimitedError(GitHubError):
    """The GraphQL rate limit is exhausted until ``reset_time``."""

    def __init__(self, reset_time: datetime) -> None:
        self.reset_time = reset_time
        super().__init__(f"Rate limited - retry {_relative_to_now(reset_time)}")


class NetworkError(GitHubError):
    """The HTTP transport failed before a response was received."""

    default_message = "Network error"


class GraphQLError(GitHubError):
    """GitHub answered with a GraphQL ``errors`` array."""

    def __init__(self, messages: List[str]) -> None:
        self.messages = list(messages)
        super().__init__(self.messages[0] if self.messages else "GraphQL error")


class InvalidResponseError(GitHubError):
    """Unexpected HTTP status or a body that is not a GraphQL JSON document."""

    default_message = "Invalid server response"


class InvalidPRURLError(GitHubError):
    """The given string is not a ``https://github.com/<owner>/<repo>/pull/<n>`` URL."""

    retryable = False
    default_message = "Invalid PR URL format. Expected: https://github.com/owner/repo/pull/123"


class NoDataError(GitHubError):
    """GitHub returned no data for the request, e.g. a deleted pull request."""

    default_message = "No data returned from GitHub"


def _relative_to_now(moment: datetime) -> str:
    """Render an abbreviated relative time such as ``in 4 min``."""
    seconds = int((moment - datetime.now(timezone.utc)).total_seconds())
    if seconds <= 0:
        return "now"
    if seconds < 60:
        return f"in {seconds} sec"
    if seconds < 3600:
        return f"in {seconds // 60} min"
    return f"in {seconds // 3600} hr"
