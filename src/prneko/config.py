"""Configuration parsing and validation for PR Neko."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

DEFAULT_POLL_INTERVAL_SECONDS = 180


def default_watchlist_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/prneko/watchlist.json`` (``~/.config`` by default)."""
    xdg_config_home = os.getenv("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home).expanduser()
    else:
        base = Path.home() / ".config"
    return base / "prneko" / "watchlist.json"


@dataclass(frozen=True)
class Config:
    """Validated runtime settings."""

    token: str = field(repr=False)
    username: Optional[str]
    watchlist_path: Path
    poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    request_timeout_seconds: int = 30
    mock_mode: bool = False


def _int_setting(name: str, value: Optional[int], env_name: str, default: int) -> int:
    if value is None:
        raw = os.getenv(env_name, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid value for '{env_name}': expected an integer, got {raw!r}."
            ) from exc

    if value <= 0:
        raise ConfigurationError(f"Invalid value for '{name}': expected an integer greater than 0.")
    return value


def load_config(
    poll_interval_seconds: Optional[int] = None,
    mock_mode: Optional[bool] = None,
    watchlist_path: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    Explicit arguments win over environment variables.

    Args:
        poll_interval_seconds: Seconds between background refreshes.
        mock_mode: Seed sample data instead of talking to GitHub.
        watchlist_path: Location of the persisted watchlist file.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a numeric setting is not a positive integer.
        AuthenticationError: If no GitHub token is configured outside mock mode.
    """
    if mock_mode is None:
        mock_mode = os.getenv("PRNEKO_MOCK", "").strip() == "1"

    interval = _int_setting(
        "poll_interval_seconds",
        poll_interval_seconds,
        "PRNEKO_POLL_INTERVAL",
        DEFAULT_POLL_INTERVAL_SECONDS,
    )
    timeout = _int_setting("request_timeout_seconds", None, "PRNEKO_REQUEST_TIMEOUT", 30)

    token = (os.getenv("PRNEKO_GITHUB_TOKEN") or os.getenv("GITHUB_TOKEN") or "").strip()
    if not token and not mock_mode:
        raise AuthenticationError(
            "Missing required GitHub token. "
            "Set the 'PRNEKO_GITHUB_TOKEN' or 'GITHUB_TOKEN' environment variable."
        )

    username = os.getenv("PRNEKO_GITHUB_USER", "").strip() or None

    path_value = watchlist_path or os.getenv("PRNEKO_WATCHLIST_PATH", "").strip()
    path = Path(path_value).expanduser() if path_value else default_watchlist_path()

    return Config(
        token=token,
        username=username,
        watchlist_path=path,
        poll_interval_seconds=interval,
        request_timeout_seconds=timeout,
        mock_mode=mock_mode,
    )
