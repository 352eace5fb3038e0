"""Unit tests for environment-driven settings."""

from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from lookout.config.settings import LookoutSettings
from lookout.github.errors import GitHubConfigError


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only the token is required."""
    monkeypatch.setenv("LOOKOUT_GITHUB_TOKEN", "ghp_test")

    settings = LookoutSettings.from_env(Path("/etc/lookout"))

    assert settings.github.token == "ghp_test"
    assert settings.rate_budget.quota == 60
    assert settings.rate_budget.window == dt.timedelta(minutes=60)
    assert settings.discord_webhook_url is None
    assert settings.log_level == "INFO"
    assert settings.watch_list_path == Path("/etc/lookout/watchers.yaml")
    assert settings.lock_path == Path("/etc/lookout/watchers.lock.json")


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every tunable is read from its variable."""
    monkeypatch.setenv("LOOKOUT_GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("LOOKOUT_RATE_QUOTA", "5000")
    monkeypatch.setenv("LOOKOUT_RATE_WINDOW_MINUTES", "30")
    monkeypatch.setenv("LOOKOUT_DISCORD_WEBHOOK_URL", "https://discord.test/hook")
    monkeypatch.setenv("LOOKOUT_LOG_LEVEL", "debug")

    settings = LookoutSettings.from_env(Path("conf"))

    assert settings.rate_budget.quota == 5000
    assert settings.rate_budget.window == dt.timedelta(minutes=30)
    assert settings.discord_webhook_url == "https://discord.test/hook"
    assert settings.log_level == "debug"


def test_missing_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings cannot be built without a GitHub token."""
    monkeypatch.setenv("LOOKOUT_RATE_QUOTA", "10")
    with pytest.raises(GitHubConfigError):
        LookoutSettings.from_env(Path("conf"))


@pytest.mark.parametrize(
    ("value", "fragment"),
    [("many", "must be an integer"), ("0", "must be positive"), ("-3", "must be positive")],
)
def test_invalid_quota(
    monkeypatch: pytest.MonkeyPatch, value: str, fragment: str
) -> None:
    """Numeric variables must be positive integers."""
    monkeypatch.setenv("LOOKOUT_GITHUB_TOKEN", "ghp_test")
    monkeypatch.setenv("LOOKOUT_RATE_QUOTA", value)
    with pytest.raises(ValueError, match=fragment):
        LookoutSettings.from_env(Path("conf"))
