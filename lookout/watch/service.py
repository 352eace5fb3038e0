"""Scheduler facade held by the process entry point.

:class:`WatchService` owns the :class:`WatcherRegistry` for the lifetime of
the process. At startup it reconciles the watch-list with the lock snapshot,
starts the resulting watchers and reports the diff; while running it
rewrites the lock file whenever a watcher delivers new commits; at shutdown
it stops every watcher and persists their final snapshots.
"""

from __future__ import annotations

import asyncio
import typing as typ

from lookout.common.time import Clock, utcnow

from .observability import WatchEventLogger
from .reconcile import ReconciliationResult, reconcile
from .registry import WatcherRegistry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lookout.config.lockfile import LockFileStore
    from lookout.github.scanner import RepositoryScanner
    from lookout.notify.sink import NotificationSink

    from .job import WatcherJob
    from .models import WatchedProjectSpec, WatcherSnapshot
    from .reconcile import ReconciliationDiff


class WatchService:
    """Coordinate reconciliation, the watcher registry, and the lock file."""

    def __init__(
        self,
        scanner: RepositoryScanner,
        sink: NotificationSink,
        lock_store: LockFileStore,
        *,
        clock: Clock = utcnow,
        event_logger: WatchEventLogger | None = None,
    ) -> None:
        """Build an empty registry wired to checkpoint after activity."""
        self._sink = sink
        self._lock_store = lock_store
        self._clock = clock
        self._event_logger = event_logger or WatchEventLogger()
        self._write_lock = asyncio.Lock()
        self._registry = WatcherRegistry(
            scanner,
            sink,
            clock=clock,
            on_activity=self._on_activity,
            event_logger=self._event_logger,
        )

    @property
    def registry(self) -> WatcherRegistry:
        """Return the registry of watcher jobs."""
        return self._registry

    async def start(
        self,
        declared: cabc.Sequence[WatchedProjectSpec],
        prior: cabc.Mapping[str, WatcherSnapshot],
    ) -> ReconciliationResult:
        """Reconcile, register every resolved watcher, and report the diff.

        Must be awaited on the event loop that will drive the watchers.
        """
        result = reconcile(declared, prior, now=self._clock())
        for resolved in result.resolved:
            self._registry.add(resolved.project, start=resolved.start)

        diff = result.diff
        self._event_logger.log_reconciled(
            new=len(diff.new_projects),
            changed=len(diff.changed_projects),
            retained=len(diff.retained_projects),
        )
        if not diff.is_empty:
            await self._deliver_diff(diff)
            await self.checkpoint()
        return result

    async def scan_all_now(self) -> int:
        """Run one immediate tick on every running watcher.

        Returns
        -------
        int
            Total number of commits delivered.

        """
        jobs = [job for job in self._registry if job.is_running]
        results = await asyncio.gather(*(job.run_once() for job in jobs))
        return sum(len(commits) for commits in results)

    async def checkpoint(self) -> bool:
        """Persist the current export of every watcher."""
        async with self._write_lock:
            return await self._lock_store.save_async(self._registry.export_all())

    async def shutdown(self) -> dict[str, WatcherSnapshot]:
        """Stop every watcher and persist the final snapshots."""
        snapshots = self._registry.export_all(stop=True)
        async with self._write_lock:
            await self._lock_store.save_async(snapshots)
        return snapshots

    async def _on_activity(self, job: WatcherJob) -> None:
        del job
        await self.checkpoint()

    async def _deliver_diff(self, diff: ReconciliationDiff) -> None:
        try:
            await self._sink.notify_diff(diff)
        except Exception as exc:  # noqa: BLE001 - sink failures must not abort startup
            self._event_logger.log_notification_failed("diff", exc)
