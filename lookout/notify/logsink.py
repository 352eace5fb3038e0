"""NotificationSink that writes notifications to the log."""

from __future__ import annotations

import typing as typ

from lookout.logging import get_logger, log_info

from .markdown import commit_footer, commit_title, render_diff_markdown

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lookout.github.models import NormalizedCommit
    from lookout.watch.reconcile import ReconciliationDiff

logger = get_logger(__name__)


class LoggingNotificationSink:
    """Log notifications instead of delivering them; used without a webhook."""

    async def notify_commits(self, commits: cabc.Sequence[NormalizedCommit]) -> None:
        """Log one line per commit."""
        for commit in commits:
            log_info(
                logger,
                "%s %s by %s: %s",
                commit_title(commit),
                commit_footer(commit),
                commit.author,
                commit.message.splitlines()[0] if commit.message else "",
            )

    async def notify_diff(self, diff: ReconciliationDiff) -> None:
        """Log the configuration update summary."""
        if diff.is_empty:
            return
        log_info(logger, "Configuration update\n%s", render_diff_markdown(diff))
