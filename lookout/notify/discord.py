r"""Discord webhook adapter for the NotificationSink protocol.

Usage
-----
>>> import asyncio
>>> sink = DiscordWebhookSink("https://discord.com/api/webhooks/123/abc")
>>> asyncio.run(sink.notify_commits(commits))

"""

from __future__ import annotations

import typing as typ

import httpx

from .markdown import render_commit_embed, render_diff_embed

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from lookout.github.models import NormalizedCommit
    from lookout.watch.reconcile import ReconciliationDiff

# Discord accepts at most ten embeds per message.
MAX_EMBEDS_PER_MESSAGE = 10

_HTTP_ERROR_STATUS_THRESHOLD = 400


class DiscordWebhookError(RuntimeError):
    """Raised when Discord rejects a webhook message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> DiscordWebhookError:
        """Return an error for non-2xx webhook responses."""
        return cls(f"Discord webhook HTTP {status_code}", status_code=status_code)


class DiscordWebhookSink:
    """Post notifications as embeds through a Discord webhook.

    Parameters
    ----------
    webhook_url
        Full webhook URL, including its token.
    http_client
        Optional shared client; the sink closes only clients it created.
    username
        Display name used for posted messages.

    """

    def __init__(
        self,
        webhook_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        username: str = "Lookout",
        timeout_s: float = 10.0,
    ) -> None:
        """Initialise the sink for ``webhook_url``."""
        self._webhook_url = webhook_url
        self._username = username
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def notify_commits(self, commits: cabc.Sequence[NormalizedCommit]) -> None:
        """Post one embed per commit, batched to Discord's per-message limit."""
        embeds = [render_commit_embed(commit) for commit in commits]
        for start in range(0, len(embeds), MAX_EMBEDS_PER_MESSAGE):
            await self._post(embeds[start : start + MAX_EMBEDS_PER_MESSAGE])

    async def notify_diff(self, diff: ReconciliationDiff) -> None:
        """Post the configuration update summary."""
        if diff.is_empty:
            return
        await self._post([render_diff_embed(diff)])

    async def _post(self, embeds: list[dict[str, typ.Any]]) -> None:
        if not embeds:
            return
        response = await self._client.post(
            self._webhook_url,
            json={"username": self._username, "embeds": embeds},
        )
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise DiscordWebhookError.http_error(response.status_code)
