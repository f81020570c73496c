"""Credential providers for the signed-in GitHub identity."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .errors import AuthenticationError, GitHubError
from .models import AuthIdentity

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    def get_identity(self) -> Optional[AuthIdentity]:
        """Return the current credential, or ``None`` when logged out."""
        ...


class LoginResolver(Protocol):
    def fetch_viewer_login(self, token: str) -> str:
        ...


class EnvAuthProvider:
    """Identity built from a configured token and optional username.

    When no username is configured the login is looked up once through
    ``resolver`` and cached.
    """

    def __init__(
        self,
        token: Optional[str],
        username: Optional[str] = None,
        resolver: Optional[LoginResolver] = None,
    ) -> None:
        self._token = (token or "").strip()
        self._username = (username or "").strip() or None
        self._resolver = resolver

    def get_identity(self) -> Optional[AuthIdentity]:
        if not self._token:
            return None

        if self._username is None:
            if self._resolver is None:
                raise AuthenticationError(
                    "No GitHub username configured. Set 'PRNEKO_GITHUB_USER'."
                )
            try:
                self._username = self._resolver.fetch_viewer_login(self._token)
            except GitHubError as exc:
                raise AuthenticationError(f"Could not resolve GitHub login: {exc}") from exc
            logger.info("Resolved GitHub login", extra={"username": self._username})

        return AuthIdentity(token=self._token, username=self._username)
