"""Mood derivation from queue contents."""

from __future__ import annotations

from typing import Sequence

from .models import Mood, PRItem


def derive_mood(
    blocked: Sequence[PRItem],
    merge_ready: Sequence[PRItem],
    pending_reviews: Sequence[PRItem],
) -> Mood:
    """Return the mood for the current queues.

    Fixed precedence, first non-empty queue wins: blocked (anxious),
    merge-ready (excited), pending reviews (hungry). Otherwise idle.
    """
    if blocked:
        return Mood.ANXIOUS
    if merge_ready:
        return Mood.EXCITED
    if pending_reviews:
        return Mood.HUNGRY
    return Mood.IDLE
