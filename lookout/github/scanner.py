"""Rate-limited commit scanning for a single watched project.

A scan asks the shared :class:`~lookout.github.ratelimit.RateLimitedClient`
for a permit, fetches every commit newer than the project's watermark, and
normalises the raw REST records into :class:`NormalizedCommit` values sorted
oldest first. Any malformed record fails the whole scan so that a partial
batch is never notified.
"""

from __future__ import annotations

import re
import typing as typ

import httpx

from lookout.common.slug import SEGMENT_CHARS, project_id
from lookout.common.time import format_commit_date, parse_github_datetime

from .errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    MalformedDataError,
    ScanThrottledError,
    ScanTransportError,
)
from .models import NormalizedCommit

if typ.TYPE_CHECKING:
    import datetime as dt

    from .client import CommitFetcher
    from .ratelimit import RateLimitedClient

COMMITS_TARGET = "commits"

_RESOURCE_URL_PATTERN = re.compile(
    r"^https://api\.github\.com/"
    r"(?P<type>repos|issues)/"
    rf"(?P<owner>{SEGMENT_CHARS})/"
    rf"(?P<project>{SEGMENT_CHARS})(?:/|$)"
)


def _require_mapping(
    record: dict[str, typ.Any], key: str, *, project: str, path: str
) -> dict[str, typ.Any]:
    value = record.get(key)
    if not isinstance(value, dict):
        raise MalformedDataError.missing_field(project, path)
    return value


def _require_str(
    record: dict[str, typ.Any], key: str, *, project: str, path: str
) -> str:
    value = record.get(key)
    if not isinstance(value, str):
        raise MalformedDataError.missing_field(project, path)
    return value


def _resource_project(url: str, *, project: str) -> str:
    """Return the ``owner/name`` encoded in a commit resource URL."""
    match = _RESOURCE_URL_PATTERN.match(url)
    if match is None:
        raise MalformedDataError.unsupported_url(project, url)
    return project_id(match.group("owner"), match.group("project"))


def normalize_commit(raw: dict[str, typ.Any], *, project: str) -> NormalizedCommit:
    """Convert one REST commit record into a :class:`NormalizedCommit`.

    Raises
    ------
    MalformedDataError
        If a required field is missing or the resource URL is not in
        ``owner/name`` form.

    """
    sha = _require_str(raw, "sha", project=project, path="sha")
    commit = _require_mapping(raw, "commit", project=project, path="commit")
    url = commit.get("url")
    if not isinstance(url, str):
        raise MalformedDataError.unsupported_url(project, url)
    resource_project = _resource_project(url, project=project)

    author = _require_mapping(commit, "author", project=project, path="commit.author")
    raw_date = _require_str(author, "date", project=project, path="commit.author.date")
    try:
        committed_at = parse_github_datetime(raw_date)
    except ValueError as exc:
        raise MalformedDataError.missing_field(project, "commit.author.date") from exc

    verification = commit.get("verification")
    if not isinstance(verification, dict):
        verification = {}
    account = raw.get("author")
    avatar = account.get("avatar_url") if isinstance(account, dict) else None
    html_url = raw.get("html_url")

    return NormalizedCommit(
        sha=sha,
        project=resource_project,
        author=str(author.get("name") or "unknown"),
        author_icon_url=avatar if isinstance(avatar, str) else None,
        message=str(commit.get("message") or ""),
        url=html_url if isinstance(html_url, str) else url,
        committed_at=committed_at,
        date_label=format_commit_date(committed_at),
        verified=verification.get("verified") is True,
        signed=bool(verification.get("signature")),
    )


class RepositoryScanner:
    """Fetch and normalise new commits for watched projects."""

    def __init__(self, fetcher: CommitFetcher, rate_limiter: RateLimitedClient) -> None:
        """Bind the scanner to an outbound fetcher and the shared budget."""
        self._fetcher = fetcher
        self._rate_limiter = rate_limiter

    async def scan(self, project: str, since: dt.datetime) -> list[NormalizedCommit]:
        """Return commits on ``project`` newer than ``since``, oldest first.

        Raises
        ------
        ScanThrottledError
            If the request budget is exhausted.
        ScanTransportError
            If the fetch fails at the HTTP or network level.
        MalformedDataError
            If any returned record cannot be normalised.

        """
        decision = self._rate_limiter.try_acquire(COMMITS_TARGET)
        if not decision.allowed:
            raise ScanThrottledError(project, decision.retry_after)

        try:
            records = await self._fetcher.fetch_commits(project, since=since)
        except GitHubAPIError as exc:
            raise ScanTransportError(project, exc, status_code=exc.status_code) from exc
        except GitHubResponseShapeError as exc:
            raise MalformedDataError(str(exc), project=project) from exc
        except httpx.HTTPError as exc:
            raise ScanTransportError(project, exc) from exc

        commits = [normalize_commit(record, project=project) for record in records]
        commits.sort(key=lambda commit: (commit.committed_at, commit.sha))
        return commits
