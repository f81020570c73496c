"""GitHub GraphQL client for pull request data retrieval."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlsplit

import requests

from .errors import (
    ForbiddenError,
    GraphQLError,
    InvalidPRURLError,
    InvalidResponseError,
    NetworkError,
    NoDataError,
    RateLimitedError,
    UnauthorizedError,
)
from .models import CheckState, MergeableState, RawPullRequest, ReviewDecision, parse_enum

logger = logging.getLogger(__name__)

_PULL_REQUEST_FIELDS = """
  id
  title
  url
  createdAt
  isDraft
  repository {
    nameWithOwner
  }
  reviewDecision
  mergeable
  commits(last: 1) {
    nodes {
      commit {
        statusCheckRollup {
          state
        }
      }
    }
  }
"""

AUTHORED_PRS_QUERY = (
    """
query AuthoredPRsQuery($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: ISSUE, first: $first) {
    nodes {
      ... on PullRequest {"""
    + _PULL_REQUEST_FIELDS
    + """      }
    }
  }
}
"""
)

SINGLE_PR_QUERY = (
    """
query SinglePRQuery($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {"""
    + _PULL_REQUEST_FIELDS
    + """    }
  }
}
"""
)

VIEWER_QUERY = """
query ViewerQuery {
  viewer {
    login
  }
}
"""

_GITHUB_HOSTS = {"github.com", "www.github.com"}


class PRDataSource(Protocol):
    """Where the orchestrator gets raw pull requests from."""

    def fetch_authored_prs(self, token: str, username: str) -> List[RawPullRequest]:
        ...

    def fetch_single_pr(self, token: str, url: str) -> RawPullRequest:
        ...


def parse_pr_url(url: str) -> Tuple[str, str, int]:
    """Split a pull request URL into ``(owner, repo, number)``.

    Only ``https://github.com/<owner>/<repo>/pull/<number>`` (``www.`` and a
    trailing slash allowed) is accepted.

    Raises:
        InvalidPRURLError: For any other input.
    """
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidPRURLError() from exc

    if parts.scheme != "https" or hostname not in _GITHUB_HOSTS:
        raise InvalidPRURLError()

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) != 4 or segments[2] != "pull":
        raise InvalidPRURLError()

    # str.isdigit also accepts superscripts and other non-decimal digits.
    number = segments[3]
    if not (number.isascii() and number.isdigit()):
        raise InvalidPRURLError()

    return segments[0], segments[1], int(number)


class GitHubClient:
    """Small, typed client for the GitHub GraphQL API."""

    _GRAPHQL_URL = "https://api.github.com/graphql"
    _AUTHORED_PAGE_SIZE = 50
    _MAX_RETRIES = 3
    _MAX_BACKOFF_SECONDS = 30
    _RATE_LIMIT_FLOOR = 10

    def __init__(self, timeout_seconds: int = 30, session: Optional[requests.Session] = None) -> None:
        """Initialize a GitHub API client.

        Args:
            timeout_seconds: Per-request timeout in seconds.
            session: Optional preconfigured HTTP session.
        """
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        self._rate_limit_remaining: Optional[int] = None
        self._rate_limit_reset: Optional[datetime] = None

    def _update_rate_limits(self, response: requests.Response) -> None:
        """Track GitHub's rate limit headers from the latest response."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            try:
                self._rate_limit_remaining = int(remaining)
            except ValueError:
                pass

        reset = response.headers.get("X-RateLimit-Reset")
        if reset is not None:
            try:
                self._rate_limit_reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)
            except ValueError:
                pass

    def _check_rate_limit(self) -> None:
        """Refuse to send a request while the remaining quota is nearly exhausted."""
        if self._rate_limit_remaining is None or self._rate_limit_reset is None:
            return
        if (
            self._rate_limit_remaining <= self._RATE_LIMIT_FLOOR
            and datetime.now(timezone.utc) < self._rate_limit_reset
        ):
            raise RateLimitedError(self._rate_limit_reset)

    def _rate_limit_reset_or_now(self) -> datetime:
        return self._rate_limit_reset or datetime.now(timezone.utc)

    def _post_graphql(
        self,
        token: str,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Execute a GraphQL query, retrying transport failures and 5xx responses.

        Returns:
            The ``data`` member of the GraphQL response.

        Raises:
            GitHubError: A subclass describing why the request failed.
        """
        self._check_rate_limit()

        body: Dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables
        headers = {"Authorization": f"Bearer {token}"}

        for attempt in range(1, self._MAX_RETRIES + 1):
            try:
                response = self._session.post(
                    self._GRAPHQL_URL,
                    json=body,
                    headers=headers,
                    timeout=self._timeout_seconds,
                )
            except requests.RequestException as exc:
                if attempt == self._MAX_RETRIES:
                    raise NetworkError(f"Network error: {exc}") from exc
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            self._update_rate_limits(response)
            status_code = response.status_code

            if 500 <= status_code <= 599 and attempt < self._MAX_RETRIES:
                logger.debug(
                    "Retrying GitHub request after server error",
                    extra={"status_code": status_code, "attempt": attempt},
                )
                time.sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)))
                continue

            return self._decode_response(response)

        raise NetworkError("GitHub request failed after retries")

    def _decode_response(self, response: requests.Response) -> Dict[str, Any]:
        status_code = response.status_code
        if status_code == 401:
            raise UnauthorizedError()
        if status_code == 403:
            if self._rate_limit_remaining == 0:
                raise RateLimitedError(self._rate_limit_reset_or_now())
            raise ForbiddenError()
        if status_code == 429:
            raise RateLimitedError(self._rate_limit_reset_or_now())
        if status_code != 200:
            raise InvalidResponseError(
                f"Invalid server response: HTTP {status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise InvalidResponseError("GitHub API returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise InvalidResponseError("GitHub API returned unexpected payload shape")

        errors = payload.get("errors")
        if errors:
            messages = [
                str(error.get("message"))
                for error in errors
                if isinstance(error, dict) and error.get("message")
            ]
            raise GraphQLError(messages)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise NoDataError()

        return data

    def fetch_authored_prs(self, token: str, username: str) -> List[RawPullRequest]:
        """List the open pull requests authored by ``username``."""
        data = self._post_graphql(
            token,
            AUTHORED_PRS_QUERY,
            {
                "searchQuery": f"is:pr is:open author:{username}",
                "first": self._AUTHORED_PAGE_SIZE,
            },
        )
        search = data.get("search") or {}
        pull_requests: List[RawPullRequest] = []

        for node in search.get("nodes") or []:
            # Non-PR search hits come back as empty objects.
            if not isinstance(node, dict) or not node.get("id"):
                continue
            pull_requests.append(_decode_pull_request(node))

        logger.info(
            "Fetched authored pull requests",
            extra={"username": username, "count": len(pull_requests)},
        )
        return pull_requests

    def fetch_single_pr(self, token: str, url: str) -> RawPullRequest:
        """Fetch one pull request by its web URL.

        Raises:
            InvalidPRURLError: Before any request when ``url`` is malformed.
            NoDataError: When the repository or pull request does not exist.
        """
        owner, repo, number = parse_pr_url(url)
        data = self._post_graphql(
            token,
            SINGLE_PR_QUERY,
            {"owner": owner, "name": repo, "number": number},
        )
        node = (data.get("repository") or {}).get("pullRequest")
        if not isinstance(node, dict):
            raise NoDataError()
        return _decode_pull_request(node)

    def fetch_viewer_login(self, token: str) -> str:
        """Return the login of the user owning ``token``."""
        data = self._post_graphql(token, VIEWER_QUERY)
        login = (data.get("viewer") or {}).get("login")
        if not login:
            raise NoDataError()
        return str(login)


def _decode_pull_request(node: Dict[str, Any]) -> RawPullRequest:
    """Decode a GraphQL ``PullRequest`` node.

    Raises:
        InvalidResponseError: If required fields are missing or any nested
            object has an unexpected shape.
    """
    repository = node.get("repository") or {}
    if not isinstance(repository, dict):
        raise InvalidResponseError(f"GitHub pull request repository has unexpected shape: {repository!r}")
    pr_id = node.get("id")
    title = node.get("title")
    url = node.get("url")
    name_with_owner = repository.get("nameWithOwner")

    if not pr_id or title is None or not url or not name_with_owner:
        raise InvalidResponseError(
            f"GitHub pull request payload is missing required fields: {node}"
        )

    return RawPullRequest(
        id=str(pr_id),
        title=str(title),
        url=str(url),
        created_at=str(node.get("createdAt") or ""),
        is_draft=bool(node.get("isDraft")),
        repository=str(name_with_owner),
        check_state=parse_enum(CheckState, _rollup_state(node)),
        review_decision=parse_enum(ReviewDecision, node.get("reviewDecision")),
        mergeable=parse_enum(MergeableState, node.get("mergeable")),
    )


def _rollup_state(node: Dict[str, Any]) -> Optional[str]:
    """Return the status check rollup state of the PR's latest commit, if any."""
    commits = node.get("commits") or {}
    commit_nodes = (commits.get("nodes") or []) if isinstance(commits, dict) else None
    if not isinstance(commit_nodes, list):
        raise InvalidResponseError(f"GitHub pull request commits have unexpected shape: {commits!r}")
    if not commit_nodes:
        return None

    latest = commit_nodes[-1]
    if not isinstance(latest, dict):
        raise InvalidResponseError(f"GitHub commit node has unexpected shape: {latest!r}")

    commit = latest.get("commit") or {}
    rollup = commit.get("statusCheckRollup") if isinstance(commit, dict) else commit
    if rollup is None:
        return None
    if not isinstance(rollup, dict):
        raise InvalidResponseError(f"GitHub status check rollup has unexpected shape: {rollup!r}")
    return rollup.get("state")
