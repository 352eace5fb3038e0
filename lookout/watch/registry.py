"""Registry of live watcher jobs keyed by project identifier."""

from __future__ import annotations

import typing as typ

from lookout.common.time import Clock, utcnow

from .errors import AlreadyRegisteredError
from .job import WatcherJob
from .observability import WatchEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lookout.github.scanner import RepositoryScanner
    from lookout.notify.sink import NotificationSink

    from .job import ActivityHook
    from .models import WatchedProject, WatcherSnapshot


class WatcherRegistry:
    """Own every :class:`WatcherJob` and guarantee one job per project."""

    def __init__(
        self,
        scanner: RepositoryScanner,
        sink: NotificationSink,
        *,
        clock: Clock = utcnow,
        on_activity: ActivityHook | None = None,
        event_logger: WatchEventLogger | None = None,
    ) -> None:
        """Create an empty registry sharing one scanner and sink."""
        self._scanner = scanner
        self._sink = sink
        self._clock = clock
        self._on_activity = on_activity
        self._event_logger = event_logger or WatchEventLogger()
        self._jobs: dict[str, WatcherJob] = {}

    def __contains__(self, project: object) -> bool:
        """Return True when ``project`` has a registered job."""
        return project in self._jobs

    def __len__(self) -> int:
        """Return the number of registered jobs."""
        return len(self._jobs)

    def __iter__(self) -> cabc.Iterator[WatcherJob]:
        """Iterate over jobs in registration order."""
        return iter(list(self._jobs.values()))

    def get(self, project: str) -> WatcherJob | None:
        """Return the job for ``project`` if one is registered."""
        return self._jobs.get(project)

    def add(self, project: WatchedProject, *, start: bool = True) -> WatcherJob:
        """Register a job for ``project`` and start it unless told otherwise.

        Raises
        ------
        AlreadyRegisteredError
            If ``project.project`` already has a job; the existing job is left
            untouched.

        """
        if project.project in self._jobs:
            raise AlreadyRegisteredError.for_project(project.project)

        job = WatcherJob(
            project,
            self._scanner,
            self._sink,
            clock=self._clock,
            on_activity=self._on_activity,
            event_logger=self._event_logger,
        )
        self._jobs[project.project] = job
        self._event_logger.log_registered(project.project, project.scan_interval_min)
        if start:
            job.start()
        return job

    def export_all(self, *, stop: bool = False) -> dict[str, WatcherSnapshot]:
        """Return a snapshot of every registered job keyed by project.

        With ``stop=True`` each job is stopped right after its snapshot is
        taken, so the exported status tells whether it was running at
        shutdown.
        """
        exports: dict[str, WatcherSnapshot] = {}
        for project, job in list(self._jobs.items()):
            exports[project] = job.export()
            if stop:
                job.stop()
        return exports

    def stop_all(self) -> None:
        """Stop every registered job."""
        for job in list(self._jobs.values()):
            job.stop()
