"""Pull request classification into actionable queues.

Rules for authored pull requests, first match wins:
- Draft PRs are not shown anywhere.
- Blocked: failing/errored checks, merge conflicts or changes requested.
- Merge-ready: checks passing (or none configured), no conflicts,
  approved (or no review required), and at least one of those known to be
  positive.
- Waiting for review: no review decision yet, or review required.
- Anything else falls back to waiting for review so it is never dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .models import (
    CheckState,
    MergeableState,
    PRItem,
    PRStatus,
    QueueType,
    RawPullRequest,
    ReviewDecision,
)

logger = logging.getLogger(__name__)

_FAILING_CHECKS = {CheckState.FAILURE, CheckState.ERROR}


def classify_authored(raw: RawPullRequest) -> Optional[Tuple[PRItem, QueueType]]:
    """Classify an authored PR; returns ``None`` for drafts."""
    if raw.is_draft:
        return None

    item = to_item(raw)

    if _is_blocked(raw):
        return item, QueueType.BLOCKED

    if _is_merge_ready(raw):
        return item, QueueType.MERGE_READY

    if _is_waiting_for_review(raw):
        return item, QueueType.WAITING_FOR_REVIEW

    # Indeterminate (e.g. a review decision value added to the schema later).
    return item, QueueType.WAITING_FOR_REVIEW


def partition_authored(
    raws: Iterable[RawPullRequest],
) -> Tuple[List[PRItem], List[PRItem], List[PRItem]]:
    """Split authored PRs into ``(waiting, ready, blocked)`` keeping fetch order."""
    waiting: List[PRItem] = []
    ready: List[PRItem] = []
    blocked: List[PRItem] = []
    excluded = 0

    for raw in raws:
        result = classify_authored(raw)
        if result is None:
            excluded += 1
            continue
        item, queue = result
        if queue is QueueType.BLOCKED:
            blocked.append(item)
        elif queue is QueueType.MERGE_READY:
            ready.append(item)
        else:
            waiting.append(item)

    logger.debug(
        "Classified authored pull requests",
        extra={
            "waiting": len(waiting),
            "ready": len(ready),
            "blocked": len(blocked),
            "excluded": excluded,
        },
    )
    return waiting, ready, blocked


def to_item(raw: RawPullRequest) -> PRItem:
    """Normalize a raw PR without assigning it to a queue."""
    return PRItem(
        id=raw.id,
        title=raw.title,
        repository=raw.repository,
        status=map_check_status(raw),
        created_at=parse_timestamp(raw.created_at),
        url=raw.url,
    )


def map_check_status(raw: RawPullRequest) -> PRStatus:
    """Map the commit check rollup to a display status."""
    state = raw.check_state
    if state is None:
        # No checks configured, nothing is blocking.
        return PRStatus.PASSING
    if state is CheckState.SUCCESS:
        return PRStatus.PASSING
    if state in _FAILING_CHECKS:
        return PRStatus.FAILING
    return PRStatus.PENDING


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a GitHub ISO8601 timestamp into an aware UTC datetime.

    Malformed or missing values fall back to the current time instead of
    raising.
    """
    if value:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)

    logger.warning("Unparseable pull request timestamp, using now", extra={"value": value})
    return datetime.now(timezone.utc)


def _is_blocked(raw: RawPullRequest) -> bool:
    if raw.check_state in _FAILING_CHECKS:
        return True
    if raw.mergeable is MergeableState.CONFLICTING:
        return True
    return raw.review_decision is ReviewDecision.CHANGES_REQUESTED


def _is_merge_ready(raw: RawPullRequest) -> bool:
    if raw.is_draft:
        return False
    if raw.check_state is not None and raw.check_state is not CheckState.SUCCESS:
        return False
    if raw.mergeable is MergeableState.CONFLICTING:
        return False
    # reviewDecision is absent when no branch protection requires reviews.
    if raw.review_decision is not None and raw.review_decision is not ReviewDecision.APPROVED:
        return False
    # Nothing known yet (no checks, mergeability still computing, no reviews).
    return (
        raw.check_state is CheckState.SUCCESS
        or raw.mergeable is MergeableState.MERGEABLE
        or raw.review_decision is ReviewDecision.APPROVED
    )


def _is_waiting_for_review(raw: RawPullRequest) -> bool:
    return raw.review_decision is None or raw.review_decision is ReviewDecision.REVIEW_REQUIRED
