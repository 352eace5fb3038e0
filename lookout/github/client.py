"""GitHub REST client used by repository scanners."""

from __future__ import annotations

import dataclasses
import datetime as dt
import os
import typing as typ

import httpx

from lookout.common.slug import parse_project_id
from lookout.common.time import ensure_tzaware

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"

_HTTP_ERROR_STATUS_THRESHOLD = 400
_PAGE_SIZE = 100


class CommitFetcher(typ.Protocol):
    """Interface for fetching raw commit records for a project."""

    async def fetch_commits(
        self, project: str, *, since: dt.datetime
    ) -> list[dict[str, typ.Any]]:
        """Return raw commit records newer than ``since``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str
    api_url: str = DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "lookout/0.1"

    @classmethod
    def from_env(cls) -> GitHubRestConfig:
        """Build configuration from ``LOOKOUT_GITHUB_TOKEN`` and friends."""
        token = os.environ.get("LOOKOUT_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()
        api_url = os.environ.get("LOOKOUT_GITHUB_API_URL", "").strip()
        return cls(token=token, api_url=api_url or DEFAULT_API_URL)


def _format_since(since: dt.datetime) -> str:
    """Render ``since`` for the API, rounding partial seconds up.

    GitHub compares at whole seconds, so truncating a watermark such as
    ``12:00:30.123`` would fetch commits from ``12:00:30`` a second time.
    """
    since_utc = ensure_tzaware(since, field="since")
    if since_utc.microsecond:
        since_utc = since_utc.replace(microsecond=0) + dt.timedelta(seconds=1)
    return since_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubCommitsClient:
    """GitHub REST implementation of :class:`CommitFetcher`."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_commits(
        self, project: str, *, since: dt.datetime
    ) -> list[dict[str, typ.Any]]:
        """Return commits on the default branch newer than ``since``."""
        owner, name = parse_project_id(project)
        route = f"/repos/{owner}/{name}/commits"
        payload = await self._get(
            route, params={"since": _format_since(since), "per_page": _PAGE_SIZE}
        )
        if not isinstance(payload, list):
            raise GitHubResponseShapeError.unexpected(route, "a list")
        return [item for item in payload if isinstance(item, dict)]

    async def _get(self, route: str, *, params: dict[str, typ.Any]) -> object:
        """Issue a GET request and return the decoded JSON body."""
        url = f"{self._config.api_url.rstrip('/')}{route}"
        response = await self._client.get(url, params=params)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, route)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubResponseShapeError.unexpected(route, "JSON") from exc
