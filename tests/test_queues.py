"""Tests for queue state, mood derivation and change notification."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prneko.models import Mood, PRItem, PRStatus, QueueType
from prneko.mood import derive_mood
from prneko.queues import QueueStore


def _item(item_id: str, status: PRStatus = PRStatus.PASSING) -> PRItem:
    return PRItem(
        id=item_id,
        title=f"PR {item_id}",
        repository="acme/app",
        status=status,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        url=f"https://github.com/acme/app/pull/{item_id}",
    )


def test_derive_mood_precedence():
    """Verify the fixed mood precedence blocked > merge-ready > pending > idle."""
    x = [_item("x")]

    assert derive_mood(blocked=x, merge_ready=x, pending_reviews=x) is Mood.ANXIOUS
    assert derive_mood(blocked=[], merge_ready=x, pending_reviews=x) is Mood.EXCITED
    assert derive_mood(blocked=[], merge_ready=[], pending_reviews=x) is Mood.HUNGRY
    assert derive_mood(blocked=[], merge_ready=[], pending_reviews=[]) is Mood.IDLE


def test_new_store_is_empty_and_idle():
    """Verify queues start empty with an idle mood."""
    store = QueueStore()

    assert store.aggregate_count() == 0
    assert store.mood is Mood.IDLE
    assert all(items == () for items in store.snapshot().values())


def test_waiting_for_review_does_not_affect_mood():
    """Verify items waiting for review leave the mood idle."""
    store = QueueStore()
    store.replace_classified_queues(waiting=[_item("w")], ready=[], blocked=[])

    assert store.mood is Mood.IDLE
    assert store.aggregate_count() == 1


def test_blocked_then_clear_blocked_goes_idle():
    """Verify mood moves from anxious to idle when the only blocked PR is cleared."""
    store = QueueStore()
    store.replace_classified_queues(waiting=[], ready=[], blocked=[_item("x")])

    assert store.mood is Mood.ANXIOUS

    store.clear_blocked()

    assert store.items(QueueType.MERGE_READY) == ()
    assert store.items(QueueType.PENDING_REVIEWS) == ()
    assert store.mood is Mood.IDLE


def test_blocked_wins_over_merge_ready():
    """Verify a store with blocked and merge-ready items is anxious."""
    store = QueueStore()
    store.replace_classified_queues(waiting=[], ready=[_item("r")], blocked=[_item("b")])

    assert store.mood is Mood.ANXIOUS


def test_replace_classified_queues_replaces_wholesale_and_keeps_pending():
    """Verify replacement swaps the three classified queues and leaves pending reviews alone."""
    store = QueueStore()
    store.append_pending(_item("p"))
    store.replace_classified_queues(waiting=[_item("a")], ready=[_item("b")], blocked=[_item("c")])

    store.replace_classified_queues(waiting=[_item("d"), _item("e")], ready=[], blocked=[])

    assert [item.id for item in store.items(QueueType.WAITING_FOR_REVIEW)] == ["d", "e"]
    assert store.items(QueueType.MERGE_READY) == ()
    assert store.items(QueueType.BLOCKED) == ()
    assert [item.id for item in store.items(QueueType.PENDING_REVIEWS)] == ["p"]


def test_append_pending_is_idempotent_by_id():
    """Verify adding the same id twice leaves the queue length unchanged."""
    store = QueueStore()

    assert store.append_pending(_item("p")) is True
    assert store.append_pending(_item("p", status=PRStatus.FAILING)) is False

    pending = store.items(QueueType.PENDING_REVIEWS)
    assert len(pending) == 1
    assert pending[0].status is PRStatus.PASSING


def test_append_pending_keeps_arrival_order():
    """Verify pending reviews are kept in arrival order."""
    store = QueueStore()
    for item_id in ["3", "1", "2"]:
        store.append_pending(_item(item_id))

    assert [item.id for item in store.items(QueueType.PENDING_REVIEWS)] == ["3", "1", "2"]
    assert store.mood is Mood.HUNGRY


def test_remove_pending_returns_item_and_missing_id_is_noop():
    """Verify removal by id returns the item and ignores unknown ids."""
    store = QueueStore()
    store.append_pending(_item("p"))

    assert store.remove_pending("missing") is None
    removed = store.remove_pending("p")

    assert removed is not None
    assert removed.id == "p"
    assert store.aggregate_count() == 0


def test_clear_all_empties_every_queue():
    """Verify clear_all resets all four queues."""
    store = QueueStore()
    store.append_pending(_item("p"))
    store.replace_classified_queues(waiting=[_item("a")], ready=[_item("b")], blocked=[_item("c")])

    store.clear_all()

    assert store.aggregate_count() == 0
    assert store.mood is Mood.IDLE


def test_aggregate_count_sums_all_queues():
    """Verify the badge count covers all four queues."""
    store = QueueStore()
    store.append_pending(_item("p"))
    store.replace_classified_queues(
        waiting=[_item("a"), _item("b")],
        ready=[_item("c")],
        blocked=[_item("d")],
    )

    assert store.aggregate_count() == 5


def test_observers_are_notified_and_can_unsubscribe():
    """Verify observers see mutations until they unsubscribe."""
    store = QueueStore()
    observer = Mock()
    unsubscribe = store.subscribe(observer)

    store.append_pending(_item("p"))
    store.append_pending(_item("p"))
    store.clear_blocked()

    assert observer.call_count == 2
    observer.assert_called_with(store)

    unsubscribe()
    store.clear_all()

    assert observer.call_count == 2


def test_failing_observer_does_not_break_mutation():
    """Verify an observer exception is logged and other observers still run."""
    store = QueueStore()
    broken = Mock(side_effect=RuntimeError("boom"))
    healthy = Mock()
    store.subscribe(broken)
    store.subscribe(healthy)

    store.append_pending(_item("p"))

    assert store.aggregate_count() == 1
    healthy.assert_called_once_with(store)
