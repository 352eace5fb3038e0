"""Unit tests for commit normalisation and rate-limited scanning."""

from __future__ import annotations

import datetime as dt

import httpx
import pytest

from lookout.github.errors import (
    GitHubAPIError,
    GitHubResponseShapeError,
    MalformedDataError,
    ScanThrottledError,
    ScanTransportError,
)
from lookout.github.scanner import normalize_commit
from tests.helpers.watch_fakes import (
    T0,
    FakeClock,
    FakeCommitFetcher,
    make_raw_commit,
    make_scanner,
)


class TestNormalizeCommit:
    """Tests for normalize_commit."""

    def test_maps_rest_fields(self) -> None:
        """Every notification field is taken from the REST record."""
        commit = normalize_commit(
            make_raw_commit("0123456789abcdef", date="2025-01-15T12:30:05Z"),
            project="octo/reef",
        )

        assert commit.sha == "0123456789abcdef"
        assert commit.short_sha == "0123456"
        assert commit.project == "octo/reef"
        assert commit.author == "Octo Cat"
        assert commit.author_icon_url == "https://avatars.githubusercontent.com/u/1"
        assert commit.message == "Tidy the reef"
        assert commit.url == "https://github.com/octo/reef/commit/0123456789abcdef"
        assert commit.committed_at == dt.datetime(2025, 1, 15, 12, 30, 5, tzinfo=dt.UTC)
        assert commit.date_label == "2025/01/15 12:30:05"
        assert commit.verified is True
        assert commit.signed is True

    def test_unsigned_unverified_commit(self) -> None:
        """Missing verification data reads as unverified and unsigned."""
        commit = normalize_commit(
            make_raw_commit("abc", verified=False, signature=None),
            project="octo/reef",
        )
        assert (commit.verified, commit.signed) == (False, False)

    def test_missing_author_name_defaults_to_unknown(self) -> None:
        """A commit without an author name is still announced."""
        commit = normalize_commit(make_raw_commit("abc", author=None), project="octo/reef")
        assert commit.author == "unknown"

    def test_falls_back_to_api_url_without_html_url(self) -> None:
        """The API URL is used when no browser URL is present."""
        raw = make_raw_commit("abc")
        del raw["html_url"]
        commit = normalize_commit(raw, project="octo/reef")
        assert commit.url == "https://api.github.com/repos/octo/reef/git/commits/abc"

    def test_accepts_hyphenated_names(self) -> None:
        """Owner and repository names may contain hyphens and dots."""
        commit = normalize_commit(
            make_raw_commit("abc", project="octo-labs/reef-watch.py"),
            project="octo-labs/reef-watch.py",
        )
        assert commit.project == "octo-labs/reef-watch.py"

    def test_accepts_bare_repository_url(self) -> None:
        """A URL that ends at the repository name still identifies it."""
        commit = normalize_commit(
            make_raw_commit("abc", url="https://api.github.com/repos/octo/reef"),
            project="octo/reef",
        )
        assert commit.project == "octo/reef"

    @pytest.mark.parametrize(
        "url",
        [
            "https://api.github.com/repos/octo/",
            "https://api.github.com/gists/octo/reef/abc",
            "https://example.com/repos/octo/reef/git/commits/abc",
            "not a url",
        ],
    )
    def test_rejects_unsupported_url(self, url: str) -> None:
        """Resource URLs outside owner/name form are malformed."""
        with pytest.raises(MalformedDataError, match="unsupported GitHub URL") as info:
            normalize_commit(make_raw_commit("abc", url=url), project="octo/reef")
        assert info.value.project == "octo/reef"

    def test_rejects_missing_date(self) -> None:
        """A commit without an author date cannot be ordered."""
        raw = make_raw_commit("abc")
        del raw["commit"]["author"]["date"]
        with pytest.raises(MalformedDataError, match=r"commit\.author\.date"):
            normalize_commit(raw, project="octo/reef")

    def test_rejects_missing_sha(self) -> None:
        """A commit without a sha cannot be identified."""
        raw = make_raw_commit("abc")
        del raw["sha"]
        with pytest.raises(MalformedDataError, match="sha"):
            normalize_commit(raw, project="octo/reef")


class TestRepositoryScanner:
    """Tests for RepositoryScanner.scan."""

    @pytest.mark.asyncio
    async def test_returns_commits_oldest_first(self, clock: FakeClock) -> None:
        """Commits are sorted by commit time, then sha."""
        fetcher = FakeCommitFetcher(
            [
                make_raw_commit("ccc", date="2025-01-15T12:50:00Z"),
                make_raw_commit("bbb", date="2025-01-15T12:10:00Z"),
                make_raw_commit("aaa", date="2025-01-15T12:50:00Z"),
            ]
        )
        scanner = make_scanner(fetcher, clock)

        commits = await scanner.scan("octo/reef", T0)

        assert [commit.sha for commit in commits] == ["bbb", "aaa", "ccc"]
        assert fetcher.calls == [("octo/reef", T0)], "Expected since to be forwarded."

    @pytest.mark.asyncio
    async def test_one_malformed_record_fails_the_scan(self, clock: FakeClock) -> None:
        """A partial batch is never returned."""
        fetcher = FakeCommitFetcher(
            [
                make_raw_commit("good"),
                make_raw_commit("bad", url="https://api.github.com/repos/octo/"),
            ]
        )
        scanner = make_scanner(fetcher, clock)

        with pytest.raises(MalformedDataError):
            await scanner.scan("octo/reef", T0)

    @pytest.mark.asyncio
    async def test_throttled_scan_does_not_fetch(self, clock: FakeClock) -> None:
        """An exhausted budget raises before any network call."""
        fetcher = FakeCommitFetcher()
        scanner = make_scanner(fetcher, clock, quota=1)
        await scanner.scan("octo/reef", T0)

        with pytest.raises(ScanThrottledError) as info:
            await scanner.scan("octo/kelp", T0)

        assert info.value.retry_after > dt.timedelta(0)
        assert info.value.project == "octo/kelp"
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_budget_is_shared_across_projects(self, clock: FakeClock) -> None:
        """Scans of different projects draw on the same quota."""
        scanner = make_scanner(FakeCommitFetcher(), clock, quota=2)
        await scanner.scan("octo/reef", T0)
        await scanner.scan("octo/kelp", T0)

        with pytest.raises(ScanThrottledError):
            await scanner.scan("octo/coral", T0)

    @pytest.mark.asyncio
    async def test_http_status_becomes_transport_error(self, clock: FakeClock) -> None:
        """GitHub error responses surface as transport errors with status."""
        error = GitHubAPIError.http_error(502, "/repos/octo/reef/commits")
        scanner = make_scanner(FakeCommitFetcher(error=error), clock)

        with pytest.raises(ScanTransportError) as info:
            await scanner.scan("octo/reef", T0)

        assert info.value.status_code == 502
        assert info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_network_failure_becomes_transport_error(
        self, clock: FakeClock
    ) -> None:
        """Connection failures carry no status code."""
        error = httpx.ConnectError("connection refused")
        scanner = make_scanner(FakeCommitFetcher(error=error), clock)

        with pytest.raises(ScanTransportError) as info:
            await scanner.scan("octo/reef", T0)

        assert info.value.status_code is None
        assert "connection refused" in str(info.value)

    @pytest.mark.asyncio
    async def test_response_shape_becomes_malformed_data(
        self, clock: FakeClock
    ) -> None:
        """Payloads of the wrong type are malformed data."""
        error = GitHubResponseShapeError.unexpected("/repos/octo/reef/commits", "a list")
        scanner = make_scanner(FakeCommitFetcher(error=error), clock)

        with pytest.raises(MalformedDataError, match="is not a list"):
            await scanner.scan("octo/reef", T0)


@pytest.mark.parametrize(
    ("retry_after", "minutes"),
    [
        (dt.timedelta(0), 1),
        (dt.timedelta(seconds=30), 1),
        (dt.timedelta(seconds=90), 2),
        (dt.timedelta(minutes=60), 60),
    ],
)
def test_throttled_message_rounds_minutes_up(
    retry_after: dt.timedelta, minutes: int
) -> None:
    """The wait is reported in whole minutes, never zero."""
    error = ScanThrottledError("octo/reef", retry_after)
    assert str(error) == (
        f"too many GitHub requests, scan of octo/reef must wait {minutes} minute(s)"
    )
    assert error.retry_after == retry_after
