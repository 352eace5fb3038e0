"""Merge the declared watch-list with the lock snapshot of the previous run.

Reconciliation decides which watchers to start at boot and reports what
changed since the last run:

* declared projects missing from the snapshot start fresh, scanning from
  "now";
* declared projects present in the snapshot keep their watermark, and adopt
  the declared ``api`` and ``scan_interval_min`` when those drifted;
* snapshot-only projects are retained unchanged, because reconciliation only
  ever adds watchers.

The merge is pure: it performs no I/O and never touches the registry.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from .models import WatchedProject, WatcherStatus

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .models import WatchedProjectSpec, WatcherSnapshot

RECONCILED_FIELDS: tuple[str, ...] = ("api", "scan_interval_min")


@dataclasses.dataclass(frozen=True, slots=True)
class ResolvedWatcher:
    """A watcher to register at startup."""

    project: WatchedProject
    start: bool = True


@dataclasses.dataclass(slots=True)
class ReconciliationDiff:
    """Differences between the declared watch-list and the lock snapshot.

    Attributes
    ----------
    new_projects
        Declared projects absent from the snapshot, in declaration order.
    changed_projects
        ``project -> field -> (declared, snapshot)`` for drifted fields.
    retained_projects
        Snapshot-only projects kept although no longer declared.

    """

    new_projects: list[WatchedProject] = dataclasses.field(default_factory=list)
    changed_projects: dict[str, dict[str, tuple[object, object]]] = dataclasses.field(
        default_factory=dict
    )
    retained_projects: list[WatchedProject] = dataclasses.field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return True when nothing needs reporting."""
        return not (self.new_projects or self.changed_projects or self.retained_projects)


@dataclasses.dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Resolved watchers in start order plus the diff report."""

    resolved: list[ResolvedWatcher]
    diff: ReconciliationDiff


def _field_changes(
    spec: WatchedProjectSpec, snapshot: WatcherSnapshot
) -> dict[str, tuple[object, object]]:
    changes: dict[str, tuple[object, object]] = {}
    for field in RECONCILED_FIELDS:
        declared = getattr(spec, field)
        recorded = getattr(snapshot, field)
        if declared != recorded:
            changes[field] = (declared, recorded)
    return changes


def reconcile(
    declared: cabc.Sequence[WatchedProjectSpec],
    prior: cabc.Mapping[str, WatcherSnapshot],
    *,
    now: dt.datetime,
) -> ReconciliationResult:
    """Resolve the watchers to start from declarations and the prior snapshot.

    Parameters
    ----------
    declared
        Watch-list entries in declaration order; project ids are unique.
    prior
        Lock snapshot keyed by project id; empty on a first run.
    now
        Watermark given to brand-new projects.

    Returns
    -------
    ReconciliationResult
        Declared projects first in declaration order, then retained snapshot
        projects in snapshot order, with the diff report.

    """
    diff = ReconciliationDiff()
    resolved: list[ResolvedWatcher] = []
    declared_ids: set[str] = set()

    for spec in declared:
        declared_ids.add(spec.project)
        snapshot = prior.get(spec.project)
        if snapshot is None:
            project = WatchedProject.from_spec(spec, now=now)
            diff.new_projects.append(project)
            resolved.append(ResolvedWatcher(project=project))
            continue

        changes = _field_changes(spec, snapshot)
        if changes:
            diff.changed_projects[spec.project] = changes
        project = WatchedProject(
            project=spec.project,
            scan_interval_min=spec.scan_interval_min,
            last_scan_at=snapshot.last_commit_scan_at,
            api=spec.api,
        )
        resolved.append(ResolvedWatcher(project=project))

    for project_id, snapshot in prior.items():
        if project_id in declared_ids:
            continue
        project = WatchedProject.from_snapshot(snapshot)
        diff.retained_projects.append(project)
        resolved.append(
            ResolvedWatcher(
                project=project,
                start=snapshot.status == WatcherStatus.RUNNING,
            )
        )

    return ReconciliationResult(resolved=resolved, diff=diff)
