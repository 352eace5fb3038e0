"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from tests.helpers.watch_fakes import FakeClock, FakeCommitFetcher, RecordingSink


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at the reference instant."""
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeCommitFetcher:
    """Return a fetcher with no commits."""
    return FakeCommitFetcher()


@pytest.fixture
def sink() -> RecordingSink:
    """Return an in-memory notification sink."""
    return RecordingSink()


@pytest.fixture(autouse=True)
def _clear_lookout_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of settings tests."""
    for name in (
        "LOOKOUT_GITHUB_TOKEN",
        "LOOKOUT_GITHUB_API_URL",
        "LOOKOUT_RATE_QUOTA",
        "LOOKOUT_RATE_WINDOW_MINUTES",
        "LOOKOUT_DISCORD_WEBHOOK_URL",
        "LOOKOUT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
