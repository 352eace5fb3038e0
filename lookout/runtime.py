"""Lookout process entry point.

Run the watcher service against a configuration directory::

    python -m lookout.runtime /etc/lookout

The directory must contain ``watchers.yaml``; ``watchers.lock.json`` is
created next to it. Credentials and tuning come from the environment:

- ``LOOKOUT_GITHUB_TOKEN``: GitHub API token (required)
- ``LOOKOUT_GITHUB_API_URL``: REST API base URL (default ``https://api.github.com``)
- ``LOOKOUT_RATE_QUOTA``: Requests allowed per window (default ``60``)
- ``LOOKOUT_RATE_WINDOW_MINUTES``: Rate window length (default ``60``)
- ``LOOKOUT_DISCORD_WEBHOOK_URL``: Discord webhook (optional; log-only otherwise)
- ``LOOKOUT_LOG_LEVEL``: Log level (default ``INFO``)

The process runs until SIGINT or SIGTERM, then stops every watcher and
writes the lock file.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import os
import signal
import typing as typ
from pathlib import Path

from lookout.config.loader import load_watch_config
from lookout.config.lockfile import LockFileStore
from lookout.config.settings import LookoutSettings
from lookout.github.client import GitHubCommitsClient
from lookout.github.errors import GitHubConfigError
from lookout.github.ratelimit import RateLimitedClient
from lookout.github.scanner import RepositoryScanner
from lookout.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from lookout.notify.discord import DiscordWebhookSink
from lookout.notify.logsink import LoggingNotificationSink
from lookout.watch.errors import WatchConfigError
from lookout.watch.service import WatchService

if typ.TYPE_CHECKING:
    from lookout.config.loader import WatchConfig
    from lookout.notify.sink import NotificationSink
    from lookout.watch.models import WatcherSnapshot

__all__ = ["main", "run", "serve"]

logger = get_logger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lookout",
        description="Watch GitHub repositories and announce new commits.",
    )
    parser.add_argument(
        "config_dir",
        type=Path,
        help="configuration directory holding watchers.yaml and its lock file",
    )
    parser.add_argument(
        "--scan-now",
        action="store_true",
        help="scan every watcher once at startup instead of waiting a full interval",
    )
    return parser.parse_args(argv)


def _build_sink(settings: LookoutSettings) -> NotificationSink:
    if settings.discord_webhook_url is None:
        log_warning(
            logger,
            "LOOKOUT_DISCORD_WEBHOOK_URL is not set; notifications go to the log",
        )
        return LoggingNotificationSink()
    return DiscordWebhookSink(settings.discord_webhook_url)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in _SHUTDOWN_SIGNALS:
        # add_signal_handler is unavailable on some platforms (e.g. Windows)
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)


async def serve(
    service: WatchService,
    config: WatchConfig,
    prior: dict[str, WatcherSnapshot],
    stop_event: asyncio.Event,
    *,
    scan_now: bool = False,
) -> dict[str, WatcherSnapshot]:
    """Run watchers until ``stop_event`` is set, then shut them down."""
    await service.start(config.watchers, prior)
    log_info(logger, "Watching %d project(s)", len(service.registry))
    try:
        if scan_now:
            delivered = await service.scan_all_now()
            log_info(logger, "Initial scan delivered %d commit(s)", delivered)
        await stop_event.wait()
    finally:
        snapshots = await service.shutdown()
        log_info(logger, "Stopped %d watcher(s)", len(snapshots))
    return snapshots


async def run(settings: LookoutSettings, *, scan_now: bool = False) -> None:
    """Load configuration and run the watcher service until signalled.

    Raises
    ------
    WatchConfigError
        If the watch-list or lock file is unusable; no watcher is started.

    """
    config = load_watch_config(settings.watch_list_path)
    lock_store = LockFileStore(settings.lock_path)
    prior = lock_store.load()

    github = GitHubCommitsClient(settings.github)
    sink = _build_sink(settings)
    scanner = RepositoryScanner(github, RateLimitedClient(settings.rate_budget))
    service = WatchService(scanner, sink, lock_store)

    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)
    try:
        await serve(service, config, prior, stop_event, scan_now=scan_now)
    finally:
        await github.aclose()
        if isinstance(sink, DiscordWebhookSink):
            await sink.aclose()


def main(argv: list[str] | None = None) -> int:
    """Start the watcher service.

    Returns
    -------
    int
        Exit code: 0 after a clean shutdown, 1 when configuration is invalid.

    """
    args = _parse_args(argv)

    log_level_str = os.environ.get("LOOKOUT_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid LOOKOUT_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    try:
        settings = LookoutSettings.from_env(args.config_dir)
    except (GitHubConfigError, ValueError) as exc:
        log_error(logger, "Invalid environment: %s", exc)
        return 1

    log_info(
        logger,
        "Starting Lookout with %s (quota=%d per %s)",
        settings.config_dir,
        settings.rate_budget.quota,
        settings.rate_budget.window,
    )
    try:
        asyncio.run(run(settings, scan_now=args.scan_now))
    except WatchConfigError as exc:
        log_error(logger, "Invalid configuration in %s:", args.config_dir)
        for issue in exc.issues:
            log_error(logger, "  - %s", issue)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
