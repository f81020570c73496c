"""Tests for the environment-backed auth provider."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prneko.auth import EnvAuthProvider
from prneko.errors import AuthenticationError, UnauthorizedError


def test_identity_with_configured_username():
    """Verify a configured token and username form the identity."""
    identity = EnvAuthProvider("token", "octocat").get_identity()

    assert identity is not None
    assert identity.token == "token"
    assert identity.username == "octocat"
    assert "token" not in repr(identity).replace("AuthIdentity", "")


def test_missing_token_means_logged_out():
    """Verify no token yields no identity."""
    assert EnvAuthProvider("", "octocat").get_identity() is None


def test_username_is_resolved_once_through_resolver():
    """Verify the login is looked up and cached when not configured."""
    resolver = Mock()
    resolver.fetch_viewer_login.return_value = "octocat"
    provider = EnvAuthProvider("token", resolver=resolver)

    first = provider.get_identity()
    second = provider.get_identity()

    assert first == second
    assert first.username == "octocat"
    resolver.fetch_viewer_login.assert_called_once_with("token")


def test_resolver_failure_raises_authentication_error():
    """Verify GitHub errors during login lookup become AuthenticationError."""
    resolver = Mock()
    resolver.fetch_viewer_login.side_effect = UnauthorizedError()

    with pytest.raises(AuthenticationError):
        EnvAuthProvider("token", resolver=resolver).get_identity()


def test_missing_username_without_resolver_raises():
    """Verify a token without username or resolver is rejected."""
    with pytest.raises(AuthenticationError):
        EnvAuthProvider("token").get_identity()
