"""Refresh orchestration: fetching, classifying and polling.

The orchestrator is the single owner of queue mutations. Authored PR
refreshes are single-flight: a caller that finds a refresh already running
returns immediately instead of waiting for it.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .classifier import partition_authored, to_item
from .config import DEFAULT_POLL_INTERVAL_SECONDS
from .errors import PRNekoError
from .github_client import PRDataSource
from .models import AuthIdentity, PRItem, PRStatus
from .queues import QueueStore
from .watchlist import Watchlist

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    """Keeps the queue store in sync with GitHub and the watchlist."""

    def __init__(
        self,
        data_source: PRDataSource,
        store: QueueStore,
        watchlist: Watchlist,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._data_source = data_source
        self.store = store
        self.watchlist = watchlist
        self._poll_interval_seconds = poll_interval_seconds

        self._flag_lock = threading.Lock()
        self._is_fetching = False
        self._last_error: Optional[str] = None

        self._poll_thread: Optional[threading.Thread] = None
        self._poll_stop: Optional[threading.Event] = None

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def is_polling(self) -> bool:
        return self._poll_thread is not None and self._poll_thread.is_alive()

    def refresh_authored(self, identity: AuthIdentity) -> bool:
        """Fetch authored PRs and replace the classified queues.

        Returns immediately without side effects while another refresh is in
        flight. On failure the error message is kept in :attr:`last_error`
        and the queues keep their previous contents.

        Returns:
            ``True`` when the queues were replaced.
        """
        with self._flag_lock:
            if self._is_fetching:
                logger.debug("Refresh already in flight, skipping")
                return False
            self._is_fetching = True

        try:
            self._last_error = None
            try:
                raw_prs = self._data_source.fetch_authored_prs(identity.token, identity.username)
            except PRNekoError as exc:
                self._last_error = str(exc)
                logger.error(
                    "GitHub fetch error",
                    extra={"error": str(exc), "retryable": getattr(exc, "retryable", False)},
                )
                return False

            waiting, ready, blocked = partition_authored(raw_prs)
            self.store.replace_classified_queues(waiting=waiting, ready=ready, blocked=blocked)
            logger.info(
                "Refreshed authored pull requests",
                extra={
                    "waiting": len(waiting),
                    "ready": len(ready),
                    "blocked": len(blocked),
                    "mood": self.store.mood.value,
                },
            )
            return True
        finally:
            with self._flag_lock:
                self._is_fetching = False

    def add_pending_by_url(self, url: str, identity: AuthIdentity) -> Optional[PRItem]:
        """Persist ``url`` to the watchlist and add its PR to pending reviews.

        The URL is stored before fetching so it survives a failed or
        interrupted fetch; a URL already in the watchlist is only re-fetched.
        """
        normalized = url.strip()
        self._last_error = None

        try:
            self.watchlist.add(normalized)
        except PRNekoError as exc:
            self._last_error = str(exc)
            logger.error("Failed to persist watchlist URL", extra={"url": normalized, "error": str(exc)})

        return self._fetch_and_append(normalized, identity)

    def remove_pending_review(self, item_id: str) -> Optional[PRItem]:
        """Remove a pending review and forget its URL."""
        item = self.store.remove_pending(item_id)
        if item is None:
            return None

        try:
            self.watchlist.remove(item.url)
        except PRNekoError as exc:
            self._last_error = str(exc)
            logger.error("Failed to update watchlist", extra={"url": item.url, "error": str(exc)})
        return item

    def load_watchlist(self, identity: AuthIdentity) -> List[str]:
        """Fetch every stored URL into pending reviews, one after another.

        A URL that fails to fetch is reported and skipped; it stays stored.

        Returns:
            The URLs that could not be fetched.
        """
        try:
            urls = self.watchlist.urls()
        except PRNekoError as exc:
            self._last_error = str(exc)
            logger.error("Failed to load watchlist", extra={"error": str(exc)})
            return []

        failed: List[str] = []
        for url in urls:
            if self._fetch_and_append(url, identity) is None:
                failed.append(url)

        logger.info(
            "Loaded watchlist",
            extra={"urls_total": len(urls), "urls_failed": len(failed)},
        )
        return failed

    def _fetch_and_append(self, url: str, identity: AuthIdentity) -> Optional[PRItem]:
        try:
            raw = self._data_source.fetch_single_pr(identity.token, url)
        except PRNekoError as exc:
            self._last_error = str(exc)
            logger.error("Failed to add PR", extra={"url": url, "error": str(exc)})
            return None

        item = to_item(raw)
        if not self.store.append_pending(item):
            return self.store.find_pending(item.id) or item
        return item

    def start_polling(self, identity: AuthIdentity) -> None:
        """Refresh authored PRs every poll interval on a background thread."""
        self.stop_polling()

        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._poll_loop,
            args=(identity, stop_event),
            name="prneko-poller",
            daemon=True,
        )
        self._poll_stop = stop_event
        self._poll_thread = thread
        thread.start()
        logger.info("Polling started", extra={"interval_seconds": self._poll_interval_seconds})

    def stop_polling(self, timeout: Optional[float] = None) -> None:
        """Signal the polling thread to exit and wait for it."""
        stop_event, thread = self._poll_stop, self._poll_thread
        self._poll_stop = None
        self._poll_thread = None
        if stop_event is None or thread is None:
            return

        stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Polling stopped")

    def _poll_loop(self, identity: AuthIdentity, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            if stop_event.wait(self._poll_interval_seconds):
                break
            if stop_event.is_set():
                break

            if self.is_fetching:
                continue

            try:
                self.refresh_authored(identity)
            except Exception:
                logger.exception("Unexpected error in polling loop")

    def login(self, identity: AuthIdentity) -> bool:
        """Start tracking ``identity``: poll, refresh now and load the watchlist.

        Returns:
            Whether the initial authored refresh succeeded.
        """
        self.start_polling(identity)
        refreshed = self.refresh_authored(identity)
        self.load_watchlist(identity)
        return refreshed

    def logout(self) -> None:
        self.stop_polling()
        self.store.clear_all()
        self._last_error = None

    def load_mock_data(self) -> None:
        """Seed every queue with sample pull requests."""
        now = datetime.now(timezone.utc)

        def _item(item_id: str, title: str, repo: str, status: PRStatus, hours: int, number: int) -> PRItem:
            return PRItem(
                id=item_id,
                title=title,
                repository=repo,
                status=status,
                created_at=now - timedelta(hours=hours),
                url=f"https://github.com/{repo}/pull/{number}",
            )

        self.store.clear_all()
        self.store.append_pending(
            _item("pr-1", "Fix authentication bug in login flow", "acme/backend", PRStatus.PASSING, 2, 123)
        )
        self.store.append_pending(
            _item("pr-2", "Add unit tests for user service", "acme/backend", PRStatus.PENDING, 24, 124)
        )
        self.store.replace_classified_queues(
            waiting=[
                _item(
                    "pr-5",
                    "Add user profile page with avatar upload",
                    "acme/frontend",
                    PRStatus.PASSING,
                    6,
                    789,
                )
            ],
            ready=[_item("pr-3", "Implement dark mode toggle", "acme/frontend", PRStatus.PASSING, 3, 456)],
            blocked=[_item("pr-4", "Refactor API error handling", "acme/backend", PRStatus.FAILING, 5, 125)],
        )
