"""In-memory queue state with change notification."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import Mood, PRItem, QueueType
from .mood import derive_mood

logger = logging.getLogger(__name__)

Observer = Callable[["QueueStore"], None]


class QueueStore:
    """Holds the four PR queues.

    ``pendingReviews`` is only changed through :meth:`append_pending` and
    :meth:`remove_pending`; the other three are replaced together by
    :meth:`replace_classified_queues`. Observers are called after every
    mutation that changed contents.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._queues: Dict[QueueType, List[PRItem]] = {queue: [] for queue in QueueType}
        self._observers: List[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` and return a function that unregisters it."""
        with self._lock:
            self._observers.append(observer)

        def _unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return _unsubscribe

    def items(self, queue: QueueType) -> Tuple[PRItem, ...]:
        with self._lock:
            return tuple(self._queues[queue])

    def snapshot(self) -> Dict[QueueType, Tuple[PRItem, ...]]:
        with self._lock:
            return {queue: tuple(items) for queue, items in self._queues.items()}

    @property
    def mood(self) -> Mood:
        with self._lock:
            return derive_mood(
                blocked=self._queues[QueueType.BLOCKED],
                merge_ready=self._queues[QueueType.MERGE_READY],
                pending_reviews=self._queues[QueueType.PENDING_REVIEWS],
            )

    def aggregate_count(self) -> int:
        """Total number of items across all four queues."""
        with self._lock:
            return sum(len(items) for items in self._queues.values())

    def replace_classified_queues(
        self,
        waiting: Iterable[PRItem],
        ready: Iterable[PRItem],
        blocked: Iterable[PRItem],
    ) -> None:
        """Replace the three classifier-driven queues in one step."""
        new_waiting, new_ready, new_blocked = list(waiting), list(ready), list(blocked)
        with self._lock:
            self._queues[QueueType.WAITING_FOR_REVIEW] = new_waiting
            self._queues[QueueType.MERGE_READY] = new_ready
            self._queues[QueueType.BLOCKED] = new_blocked
            self._notify()

    def append_pending(self, item: PRItem) -> bool:
        """Append ``item`` to pending reviews unless its id is already present.

        Returns:
            ``True`` when the item was appended.
        """
        with self._lock:
            pending = self._queues[QueueType.PENDING_REVIEWS]
            if any(existing.id == item.id for existing in pending):
                return False
            pending.append(item)
            self._notify()
            return True

    def find_pending(self, item_id: str) -> Optional[PRItem]:
        with self._lock:
            for item in self._queues[QueueType.PENDING_REVIEWS]:
                if item.id == item_id:
                    return item
            return None

    def remove_pending(self, item_id: str) -> Optional[PRItem]:
        """Remove a pending review by id; returns the removed item or ``None``."""
        with self._lock:
            item = self.find_pending(item_id)
            if item is None:
                return None
            self._queues[QueueType.PENDING_REVIEWS] = [
                existing
                for existing in self._queues[QueueType.PENDING_REVIEWS]
                if existing.id != item_id
            ]
            self._notify()
            return item

    def clear_blocked(self) -> None:
        with self._lock:
            self._queues[QueueType.BLOCKED] = []
            self._notify()

    def clear_all(self) -> None:
        with self._lock:
            for queue in QueueType:
                self._queues[queue] = []
            self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Queue observer failed")
