"""Typed watcher declarations, runtime state, and lock snapshots."""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import typing as typ

import msgspec

from lookout.common.slug import PROJECT_ID_PATTERN

DEFAULT_API = "github"
SUPPORTED_APIS = frozenset({DEFAULT_API})

ProjectId = typ.Annotated[str, msgspec.Meta(pattern=PROJECT_ID_PATTERN.pattern)]
IntervalMinutes = typ.Annotated[int, msgspec.Meta(ge=1)]
AwareDatetime = typ.Annotated[dt.datetime, msgspec.Meta(tz=True)]


class WatcherStatus(enum.StrEnum):
    """Lifecycle state recorded for a watcher."""

    RUNNING = "running"
    STOPPED = "stopped"


class WatchedProjectSpec(msgspec.Struct, kw_only=True, frozen=True, forbid_unknown_fields=True):
    """Declared watcher entry from the watch-list.

    Attributes
    ----------
    project : str
        GitHub ``owner/name`` identifier; unique across the watch-list.
    scan_interval_min : int
        Minutes between two scans of the project.
    api : str
        Source-control provider; only ``"github"`` is supported.

    """

    project: ProjectId
    scan_interval_min: IntervalMinutes
    api: str = DEFAULT_API


class WatcherSnapshot(msgspec.Struct, kw_only=True, frozen=True):
    """Persisted projection of a watcher, one entry of the lock file.

    Attributes
    ----------
    api : str
        Source-control provider the watcher talks to.
    project : str
        GitHub ``owner/name`` identifier.
    scan_interval_min : int
        Minutes between two scans.
    last_commit_scan_at : datetime
        Watermark: commits at or before this instant were already scanned.
    status : WatcherStatus
        Whether the watcher was running when the snapshot was taken.

    """

    api: str
    project: str
    scan_interval_min: int
    last_commit_scan_at: AwareDatetime
    status: WatcherStatus = WatcherStatus.STOPPED


@dataclasses.dataclass(slots=True)
class WatchedProject:
    """Resolved watcher state owned by a single :class:`WatcherJob`."""

    project: str
    scan_interval_min: int
    last_scan_at: dt.datetime
    api: str = DEFAULT_API

    @classmethod
    def from_spec(cls, spec: WatchedProjectSpec, *, now: dt.datetime) -> WatchedProject:
        """Build fresh state for a newly declared project."""
        return cls(
            project=spec.project,
            scan_interval_min=spec.scan_interval_min,
            last_scan_at=now,
            api=spec.api,
        )

    @classmethod
    def from_snapshot(cls, snapshot: WatcherSnapshot) -> WatchedProject:
        """Restore state from a lock file entry."""
        return cls(
            project=snapshot.project,
            scan_interval_min=snapshot.scan_interval_min,
            last_scan_at=snapshot.last_commit_scan_at,
            api=snapshot.api,
        )

    @property
    def scan_interval(self) -> dt.timedelta:
        """Return the scan interval as a timedelta."""
        return dt.timedelta(minutes=self.scan_interval_min)

    def advance_watermark(self, now: dt.datetime) -> dt.datetime:
        """Move the watermark forward to ``now``; it never moves backwards."""
        self.last_scan_at = max(self.last_scan_at, now)
        return self.last_scan_at

    def to_snapshot(self, status: WatcherStatus) -> WatcherSnapshot:
        """Return the lock file projection of this state."""
        return WatcherSnapshot(
            api=self.api,
            project=self.project,
            scan_interval_min=self.scan_interval_min,
            last_commit_scan_at=self.last_scan_at,
            status=status,
        )
