"""Tests for command-line argument parsing."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prneko.cli import parse_args


def test_parse_args_defaults():
    """Verify CLI parsing defaults when no arguments are provided."""
    args = parse_args([])

    assert args.add == []
    assert args.remove == []
    assert args.watch is False
    assert args.mock is None
    assert args.poll_interval is None
    assert args.verbose is False


def test_parse_args_with_repeatable_urls():
    """Verify --add and --remove can be repeated."""
    args = parse_args(
        [
            "--add",
            "https://github.com/acme/app/pull/1",
            "--add",
            "https://github.com/acme/app/pull/2",
            "--remove",
            "https://github.com/acme/app/pull/3",
            "--watch",
            "--mock",
            "--poll-interval",
            "60",
            "--verbose",
        ]
    )

    assert args.add == [
        "https://github.com/acme/app/pull/1",
        "https://github.com/acme/app/pull/2",
    ]
    assert args.remove == ["https://github.com/acme/app/pull/3"]
    assert args.watch is True
    assert args.mock is True
    assert args.poll_interval == 60
    assert args.verbose is True


def test_parse_args_reads_sys_argv(monkeypatch):
    """Verify parse_args falls back to sys.argv."""
    monkeypatch.setattr(sys, "argv", ["prneko", "--watch"])

    args = parse_args()

    assert args.watch is True


@pytest.mark.parametrize("value", ["0", "-1", "abc"])
def test_parse_args_invalid_poll_interval_exits(value):
    """Verify CLI parsing fails for non-positive or non-integer intervals."""
    with pytest.raises(SystemExit):
        parse_args(["--poll-interval", value])
