"""Domain models for PR Neko.

Raw GitHub payloads are decoded into ``RawPullRequest`` and normalized into
``PRItem`` value objects, which are what the queues hold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Type, TypeVar

_E = TypeVar("_E", bound=Enum)


def parse_enum(enum_type: Type[_E], value: object) -> Optional[_E]:
    """Map a GitHub enum string to ``enum_type``; unknown or missing values become ``None``."""
    if value is None:
        return None
    try:
        return enum_type(str(value))
    except ValueError:
        return None


class CheckState(str, Enum):
    """Status check rollup state of the latest commit."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"
    PENDING = "PENDING"
    EXPECTED = "EXPECTED"


class MergeableState(str, Enum):
    MERGEABLE = "MERGEABLE"
    CONFLICTING = "CONFLICTING"
    UNKNOWN = "UNKNOWN"


class ReviewDecision(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"


class PRStatus(str, Enum):
    """CI status shown next to a pull request."""

    PASSING = "passing"
    FAILING = "failing"
    PENDING = "pending"


class QueueType(str, Enum):
    """The four actionable queues, in display order."""

    PENDING_REVIEWS = "pendingReviews"
    WAITING_FOR_REVIEW = "waitingForReview"
    MERGE_READY = "mergeReady"
    BLOCKED = "blocked"

    @property
    def display_name(self) -> str:
        return _QUEUE_DISPLAY_NAMES[self]


_QUEUE_DISPLAY_NAMES = {
    QueueType.PENDING_REVIEWS: "Pending Reviews",
    QueueType.WAITING_FOR_REVIEW: "Waiting for Review",
    QueueType.MERGE_READY: "Merge-ready",
    QueueType.BLOCKED: "Blocked",
}


class Mood(str, Enum):
    ANXIOUS = "anxious"
    HUNGRY = "hungry"
    EXCITED = "excited"
    IDLE = "idle"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def menu_bar_icon(self) -> str:
        return _MOOD_ICONS[self]


_MOOD_ICONS = {
    Mood.ANXIOUS: "\U0001F640",
    Mood.HUNGRY: "\U0001F63F",
    Mood.EXCITED: "\U0001F638",
    Mood.IDLE: "\U0001F63A",
}


@dataclass(frozen=True, slots=True)
class PRItem:
    """Normalized pull request stored in a queue."""

    id: str
    title: str
    repository: str
    status: PRStatus
    created_at: datetime
    url: str


@dataclass(slots=True)
class RawPullRequest:
    """The subset of a GitHub GraphQL ``PullRequest`` node used for classification.

    ``review_decision`` and ``mergeable`` are ``None`` when GitHub omits them,
    which happens when no branch protection rule requires them.
    """

    id: str
    title: str
    url: str
    created_at: str
    is_draft: bool
    repository: str
    check_state: Optional[CheckState] = None
    review_decision: Optional[ReviewDecision] = None
    mergeable: Optional[MergeableState] = None


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """Token and login of the signed-in GitHub user."""

    token: str = field(repr=False)
    username: str
