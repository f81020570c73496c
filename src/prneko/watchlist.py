"""Durable list of manually added pull request URLs."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Protocol

from .errors import StorageError

logger = logging.getLogger(__name__)


class WatchlistStorage(Protocol):
    def load(self) -> List[str]:
        ...

    def save(self, urls: List[str]) -> None:
        ...


class JsonFileWatchlistStorage:
    """Stores the watchlist as a JSON array of URL strings."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> List[str]:
        """Read the stored URLs; a missing file is an empty list.

        Raises:
            StorageError: If the file cannot be read or is not a JSON string array.
        """
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read watchlist at {self.path}: {exc}") from exc

        if not isinstance(raw, list) or not all(isinstance(url, str) for url in raw):
            raise StorageError(f"Watchlist at {self.path} is not a list of URLs")
        return list(raw)

    def save(self, urls: List[str]) -> None:
        """Write the URLs atomically via a temporary sibling file."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(list(urls), indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Could not write watchlist at {self.path}: {exc}") from exc


class MemoryWatchlistStorage:
    """Non-durable storage used in mock mode."""

    def __init__(self, urls: List[str] | None = None) -> None:
        self._urls = list(urls or [])

    def load(self) -> List[str]:
        return list(self._urls)

    def save(self, urls: List[str]) -> None:
        self._urls = list(urls)


class Watchlist:
    """Ordered set of pull request URLs backed by a ``WatchlistStorage``.

    URLs are keyed on their exact string after trimming whitespace.
    """

    def __init__(self, storage: WatchlistStorage) -> None:
        self._storage = storage

    def urls(self) -> List[str]:
        return self._storage.load()

    def add(self, url: str) -> bool:
        """Persist ``url`` unless it is already stored; returns ``True`` when added."""
        normalized = url.strip()
        urls = self._storage.load()
        if normalized in urls:
            return False
        urls.append(normalized)
        self._storage.save(urls)
        logger.info("Added URL to watchlist", extra={"url": normalized})
        return True

    def remove(self, url: str) -> bool:
        """Delete ``url`` if stored; returns ``True`` when something was removed."""
        normalized = url.strip()
        urls = self._storage.load()
        if normalized not in urls:
            return False
        self._storage.save([existing for existing in urls if existing != normalized])
        logger.info("Removed URL from watchlist", extra={"url": normalized})
        return True
