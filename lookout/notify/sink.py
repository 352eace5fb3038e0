"""NotificationSink protocol for delivering watcher output.

This module defines the port through which watchers publish new commits and
the startup reconciliation report. Adapters deliver them to a chat service
(:mod:`lookout.notify.discord`) or to the log (:mod:`lookout.notify.logsink`).

The protocol is ``runtime_checkable`` to support ``isinstance`` checks in
dependency injection and tests.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lookout.github.models import NormalizedCommit
    from lookout.watch.reconcile import ReconciliationDiff


@typ.runtime_checkable
class NotificationSink(typ.Protocol):
    """Protocol for delivering commit and configuration notifications."""

    async def notify_commits(self, commits: cabc.Sequence[NormalizedCommit]) -> None:
        """Deliver new commits, oldest first.

        Parameters
        ----------
        commits
            Non-empty, chronologically ordered commits of one project.

        """
        ...

    async def notify_diff(self, diff: ReconciliationDiff) -> None:
        """Deliver a human-readable summary of a reconciliation diff.

        Parameters
        ----------
        diff
            Startup reconciliation report; callers only pass non-empty diffs.

        """
        ...
