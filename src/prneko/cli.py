"""Command-line argument parsing for PR Neko."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed CLI arguments: URLs to add or remove from the watchlist,
        watch/mock/verbose flags and the poll interval override.
    """
    parser = argparse.ArgumentParser(
        prog="prneko",
        description=(
            "Track your GitHub pull requests in four queues "
            "(pending reviews, waiting for review, merge-ready, blocked)."
        ),
    )

    parser.add_argument(
        "--add",
        action="append",
        default=[],
        metavar="URL",
        help="Add a pull request URL to the pending-review watchlist (repeatable).",
    )
    parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="URL",
        help="Remove a pull request URL from the watchlist (repeatable).",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep polling and print the queues whenever they change.",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        default=None,
        help="Show sample data instead of contacting GitHub.",
    )
    parser.add_argument(
        "--poll-interval",
        type=_positive_int,
        default=None,
        help="Seconds between refreshes in --watch mode (default: 180).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
