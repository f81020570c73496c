"""Entry point for the PR Neko command-line companion."""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from .auth import EnvAuthProvider
from .cli import parse_args
from .config import Config, load_config
from .errors import AuthenticationError, ConfigurationError, GitHubError, StorageError
from .github_client import GitHubClient
from .models import AuthIdentity
from .orchestrator import RefreshOrchestrator
from .queues import QueueStore
from .report import generate_report
from .watchlist import JsonFileWatchlistStorage, MemoryWatchlistStorage, Watchlist

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_GITHUB = 4


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_orchestrator(config: Config, client: GitHubClient) -> RefreshOrchestrator:
    """Wire the queue store, watchlist and data source together."""
    if config.mock_mode:
        storage = MemoryWatchlistStorage()
    else:
        storage = JsonFileWatchlistStorage(config.watchlist_path)

    return RefreshOrchestrator(
        data_source=client,
        store=QueueStore(),
        watchlist=Watchlist(storage),
        poll_interval_seconds=config.poll_interval_seconds,
    )


def _watch(orchestrator: RefreshOrchestrator) -> None:
    """Print the report after every queue change until interrupted."""
    unsubscribe = orchestrator.store.subscribe(
        lambda store: print("\n" + generate_report(store, orchestrator.last_error), flush=True)
    )
    try:
        while orchestrator.is_polling:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        unsubscribe()
        orchestrator.logout()


def run_companion(
    orchestrator: RefreshOrchestrator,
    identity: AuthIdentity,
    add_urls: Sequence[str],
    remove_urls: Sequence[str],
    watch: bool,
) -> int:
    """Refresh the queues, apply watchlist edits and print the report.

    Returns:
        ``EXIT_GITHUB`` when the authored refresh failed and there is nothing
        to show, otherwise ``EXIT_OK``.
    """
    for url in remove_urls:
        if not orchestrator.watchlist.remove(url):
            print(f"Not in watchlist: {url.strip()}")

    if watch:
        refreshed = orchestrator.login(identity)
    else:
        refreshed = orchestrator.refresh_authored(identity)
        orchestrator.load_watchlist(identity)

    refresh_error = orchestrator.last_error

    for url in add_urls:
        if orchestrator.add_pending_by_url(url, identity) is None:
            print(f"Could not add {url.strip()}: {orchestrator.last_error}")

    print(generate_report(orchestrator.store, refresh_error))

    if not refreshed and orchestrator.store.aggregate_count() == 0:
        if watch:
            orchestrator.logout()
        return EXIT_GITHUB

    if watch:
        _watch(orchestrator)
    return EXIT_OK


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the companion and map failures to exit codes.

    Exit codes:
        0: success
        1: unexpected error
        2: configuration or storage error
        3: missing or invalid GitHub credentials
        4: GitHub API failure with nothing to show
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)
        config = load_config(poll_interval_seconds=args.poll_interval, mock_mode=args.mock)
        client = GitHubClient(timeout_seconds=config.request_timeout_seconds)
        orchestrator = build_orchestrator(config, client)

        if config.mock_mode:
            orchestrator.load_mock_data()
            print(generate_report(orchestrator.store))
            return EXIT_OK

        identity = EnvAuthProvider(config.token, config.username, resolver=client).get_identity()
        if identity is None:
            raise AuthenticationError("Missing required GitHub token.")

        return run_companion(
            orchestrator,
            identity,
            add_urls=args.add,
            remove_urls=args.remove,
            watch=args.watch,
        )
    except (ConfigurationError, StorageError) as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        logger.error("Authentication error: %s", exc)
        return EXIT_AUTHENTICATION
    except GitHubError as exc:
        logger.error("GitHub API error: %s", exc)
        return EXIT_GITHUB
    except Exception:
        logger.exception("Unexpected error")
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
