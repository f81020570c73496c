"""Text rendering of queue state.

This module provides utilities for:
- Formatting pull request ages as abbreviated relative times.
- Building a human-readable report of the mood and every non-empty queue.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from .models import PRItem, PRStatus, QueueType
from .queues import QueueStore

_STATUS_MARKERS = {
    PRStatus.PASSING: "[ok]",
    PRStatus.FAILING: "[x]",
    PRStatus.PENDING: "[..]",
}


def format_age(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Format the time since ``created_at`` as ``Ns``, ``Nm``, ``Nh`` or ``Nd``.

    Args:
        created_at: Creation timestamp, timezone-aware.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Abbreviated age. Future timestamps render as ``0s``.
    """
    reference = now or datetime.now(timezone.utc)
    seconds = max(0, int((reference - created_at).total_seconds()))

    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_item(item: PRItem, now: Optional[datetime] = None) -> str:
    marker = _STATUS_MARKERS[item.status]
    return f"   {marker} {item.repository}: {item.title} ({format_age(item.created_at, now)})"


def generate_report(
    store: QueueStore,
    last_error: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Generate a human-readable report of the queues.

    The report starts with the mood and the aggregate count, then lists each
    non-empty queue in display order with status, repository, title and age.

    Args:
        store: Queue state to render.
        last_error: Optional error message shown under the header.
        now: Reference time for ages.

    Returns:
        Formatted multi-line text report.
    """
    mood = store.mood
    total = store.aggregate_count()
    lines: List[str] = [f"{mood.menu_bar_icon} PR Neko is {mood.display_name.lower()} ({total} actionable)"]

    if last_error:
        lines.append(f"Error: {last_error}")

    snapshot = store.snapshot()
    for queue in QueueType:
        items = snapshot[queue]
        if not items:
            continue
        lines.append("")
        lines.append(f"{queue.display_name} ({len(items)})")
        lines.extend(format_item(item, now) for item in items)

    if total == 0:
        lines.append("")
        lines.append("Nothing to do.")

    return "\n".join(lines)
