"""Watcher scheduling: jobs, registry, reconciliation, and the service facade.

Quick example
-------------

Start watchers for a watch-list and stop them on shutdown::

    >>> from lookout.watch import WatchService
    >>> service = WatchService(scanner, sink, lock_store)
    >>> await service.start(config.watchers, lock_store.load())
    >>> ...
    >>> await service.shutdown()

"""

from __future__ import annotations

from .errors import AlreadyRegisteredError, AlreadyRunningError, WatchConfigError
from .job import WatcherJob
from .models import (
    WatchedProject,
    WatchedProjectSpec,
    WatcherSnapshot,
    WatcherStatus,
)
from .observability import WatchEventLogger, WatchEventType
from .reconcile import (
    ReconciliationDiff,
    ReconciliationResult,
    ResolvedWatcher,
    reconcile,
)
from .registry import WatcherRegistry
from .service import WatchService

__all__ = [
    "AlreadyRegisteredError",
    "AlreadyRunningError",
    "ReconciliationDiff",
    "ReconciliationResult",
    "ResolvedWatcher",
    "WatchConfigError",
    "WatchEventLogger",
    "WatchEventType",
    "WatchService",
    "WatchedProject",
    "WatchedProjectSpec",
    "WatcherJob",
    "WatcherRegistry",
    "WatcherSnapshot",
    "WatcherStatus",
    "reconcile",
]
