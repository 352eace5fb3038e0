"""Recurring scan job bound to a single watched project.

A :class:`WatcherJob` owns one asyncio task that sleeps for the project's
scan interval and then performs one tick: a scan followed by delivery of the
commits it found. The timer and :meth:`WatcherJob.run_once` share one busy
marker, so a project never has more than one tick in progress, and a slow
scan only delays its own project.
"""

from __future__ import annotations

import asyncio
import typing as typ

from lookout.common.time import Clock, utcnow
from lookout.github.errors import ScanError, ScanThrottledError
from lookout.github.observability import ScanEventLogger, ScanRunContext

from .errors import AlreadyRunningError
from .models import WatcherStatus
from .observability import WatchEventLogger

if typ.TYPE_CHECKING:
    from lookout.github.models import NormalizedCommit
    from lookout.github.scanner import RepositoryScanner
    from lookout.notify.sink import NotificationSink

    from .models import WatchedProject, WatcherSnapshot

    ActivityHook: typ.TypeAlias = typ.Callable[[WatcherJob], typ.Awaitable[None]]


class WatcherJob:
    """Periodically scan one project and forward new commits to a sink."""

    def __init__(  # noqa: PLR0913
        self,
        project: WatchedProject,
        scanner: RepositoryScanner,
        sink: NotificationSink,
        *,
        clock: Clock = utcnow,
        on_activity: ActivityHook | None = None,
        scan_logger: ScanEventLogger | None = None,
        event_logger: WatchEventLogger | None = None,
    ) -> None:
        """Bind the job to its project state and collaborators."""
        self._project = project
        self._scanner = scanner
        self._sink = sink
        self._clock = clock
        self._on_activity = on_activity
        self._scan_logger = scan_logger or ScanEventLogger()
        self._event_logger = event_logger or WatchEventLogger()
        self._status = WatcherStatus.STOPPED
        self._task: asyncio.Task[None] | None = None
        self._used = False
        self._tick_owner: asyncio.Task[typ.Any] | None = None

    @property
    def project(self) -> str:
        """Return the watched project identifier."""
        return self._project.project

    @property
    def status(self) -> WatcherStatus:
        """Return the current lifecycle state."""
        return self._status

    @property
    def is_running(self) -> bool:
        """Return True while the job owns a live timer task."""
        return self._status is WatcherStatus.RUNNING

    @property
    def scan_in_flight(self) -> bool:
        """Return True while a tick is scanning or delivering its commits."""
        return self._tick_owner is not None

    def start(self) -> None:
        """Install the recurring timer task on the running event loop.

        Raises
        ------
        AlreadyRunningError
            If the job is running, or was stopped (jobs are single-use).
        RuntimeError
            If no event loop is running.

        """
        if self.is_running:
            raise AlreadyRunningError.for_project(self.project)
        if self._used:
            raise AlreadyRunningError.restart(self.project)

        loop = asyncio.get_running_loop()
        self._used = True
        self._status = WatcherStatus.RUNNING
        self._task = loop.create_task(self._run(), name=f"watcher:{self.project}")
        self._event_logger.log_started(self.project, self._project.last_scan_at)

    def stop(self) -> None:
        """Cancel future ticks; calling it again is a no-op.

        A tick already in progress is left to finish. If it is still awaiting
        the network its result is discarded; if it has advanced the watermark
        it still delivers the commits it found.
        """
        if not self.is_running:
            return

        self._status = WatcherStatus.STOPPED
        task, self._task = self._task, None
        # A timer task running its own tick exits once the tick returns.
        if task is not None and task is not self._tick_owner:
            task.cancel()
        self._event_logger.log_stopped(self.project, scan_in_flight=self.scan_in_flight)

    def export(self) -> WatcherSnapshot:
        """Return the persistable snapshot of this job without side effects."""
        return self._project.to_snapshot(self._status)

    async def run_once(self) -> list[NormalizedCommit]:
        """Run one tick immediately and return the commits it delivered.

        Returns an empty list when the job is not running, when a tick is
        already in progress, or when the scan fails.
        """
        if not self.is_running:
            return []
        return await self._tick()

    async def _run(self) -> None:
        interval_s = self._project.scan_interval.total_seconds()
        while self.is_running:
            await asyncio.sleep(interval_s)
            if not self.is_running:
                return
            try:
                await self._tick()
            except Exception as exc:  # noqa: BLE001 - keep the timer alive
                self._event_logger.log_tick_failed(self.project, exc)

    async def _tick(self) -> list[NormalizedCommit]:
        # Shared by the timer and run_once; one tick per project at a time.
        if self.scan_in_flight:
            return []
        self._tick_owner = asyncio.current_task()
        try:
            return await self._scan_and_deliver()
        finally:
            self._tick_owner = None

    async def _scan_and_deliver(self) -> list[NormalizedCommit]:
        since = self._project.last_scan_at
        context = ScanRunContext(
            project=self.project, since=since, started_at=self._clock()
        )
        self._scan_logger.log_scan_started(context)

        try:
            commits = await self._scanner.scan(self.project, since)
        except ScanThrottledError as exc:
            self._scan_logger.log_scan_throttled(context, exc)
            return []
        except ScanError as exc:
            self._scan_logger.log_scan_failed(
                context, exc, self._clock() - context.started_at
            )
            return []

        if not self.is_running:
            self._event_logger.log_scan_discarded(self.project, len(commits))
            return []

        now = self._clock()
        self._project.advance_watermark(now)
        self._scan_logger.log_scan_completed(
            context, len(commits), now - context.started_at
        )
        if not commits:
            return []

        await self._deliver(commits)
        if self._on_activity is not None:
            try:
                await self._on_activity(self)
            except Exception as exc:  # noqa: BLE001 - checkpoint failures are logged
                self._event_logger.log_tick_failed(self.project, exc)
        return commits

    async def _deliver(self, commits: list[NormalizedCommit]) -> None:
        try:
            await self._sink.notify_commits(commits)
        except Exception as exc:  # noqa: BLE001 - sink failures must not stop scans
            self._event_logger.log_notification_failed("commits", exc)
