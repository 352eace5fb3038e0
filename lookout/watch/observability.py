"""Structured lifecycle events for watchers, notifications, and the lock file."""

from __future__ import annotations

import enum
import typing as typ

from lookout.logging import get_logger, log_error, log_exception, log_info, log_warning

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

logger = get_logger(__name__)


class WatchEventType(enum.StrEnum):
    """Structured log event types for the watcher lifecycle."""

    WATCHER_REGISTERED = "watcher.registered"
    WATCHER_STARTED = "watcher.started"
    WATCHER_STOPPED = "watcher.stopped"
    SCAN_DISCARDED = "watcher.scan.discarded"
    TICK_FAILED = "watcher.tick.failed"
    NOTIFICATION_FAILED = "notification.failed"
    LOCK_WRITTEN = "lock.written"
    LOCK_SKIPPED = "lock.skipped"
    RECONCILED = "reconciliation.completed"


class WatchEventLogger:
    """Emit structured watcher lifecycle events via femtologging."""

    def log_registered(self, project: str, scan_interval_min: int) -> None:
        """Log a watcher entering the registry."""
        log_info(
            logger,
            "[%s] project=%s scan_interval_min=%d",
            WatchEventType.WATCHER_REGISTERED,
            project,
            scan_interval_min,
        )

    def log_started(self, project: str, watermark: dt.datetime) -> None:
        """Log the timer task of a watcher being installed."""
        log_info(
            logger,
            "[%s] project=%s last_commit_scan_at=%s",
            WatchEventType.WATCHER_STARTED,
            project,
            watermark.isoformat(),
        )

    def log_stopped(self, project: str, *, scan_in_flight: bool) -> None:
        """Log a watcher being stopped."""
        log_info(
            logger,
            "[%s] project=%s scan_in_flight=%s",
            WatchEventType.WATCHER_STOPPED,
            project,
            scan_in_flight,
        )

    def log_scan_discarded(self, project: str, commits_found: int) -> None:
        """Log a scan result dropped because its watcher stopped meanwhile."""
        log_warning(
            logger,
            "[%s] project=%s commits_found=%d",
            WatchEventType.SCAN_DISCARDED,
            project,
            commits_found,
        )

    def log_tick_failed(self, project: str, error: BaseException) -> None:
        """Log an unexpected failure contained inside a watcher tick."""
        log_exception(
            logger,
            f"[{WatchEventType.TICK_FAILED}] project={project} "
            f"error_type={type(error).__name__}",
            error,
        )

    def log_notification_failed(self, kind: str, error: BaseException) -> None:
        """Log a notification sink failure; the scheduler keeps running."""
        log_error(
            logger,
            "[%s] kind=%s error_type=%s error_message=%s",
            WatchEventType.NOTIFICATION_FAILED,
            kind,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_lock_written(self, path: Path, watchers: int) -> None:
        """Log the lock snapshot being persisted."""
        log_info(
            logger,
            "[%s] path=%s watchers=%d",
            WatchEventType.LOCK_WRITTEN,
            path,
            watchers,
        )

    def log_lock_skipped(self, path: Path) -> None:
        """Log that an empty export was not persisted."""
        log_info(logger, "[%s] path=%s reason=empty", WatchEventType.LOCK_SKIPPED, path)

    def log_reconciled(self, *, new: int, changed: int, retained: int) -> None:
        """Log the reconciliation outcome counts."""
        log_info(
            logger,
            "[%s] new_projects=%d changed_projects=%d retained_projects=%d",
            WatchEventType.RECONCILED,
            new,
            changed,
            retained,
        )
