"""Process settings read from the environment.

Usage
-----
Load settings for a configuration directory:

>>> import os
>>> os.environ["LOOKOUT_GITHUB_TOKEN"] = "ghp_example"
>>> settings = LookoutSettings.from_env(Path("/etc/lookout"))
>>> settings.rate_budget.quota
60

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
from pathlib import Path

from lookout.github.client import GitHubRestConfig
from lookout.github.ratelimit import DEFAULT_QUOTA, DEFAULT_WINDOW, RateBudget

from .lockfile import LOCK_FILENAME
from .loader import WATCH_LIST_FILENAME


def _parse_positive_int(env_var: str, default: int) -> int:
    """Read a positive integer env var, falling back to a default."""
    raw = os.environ.get(env_var, "")
    if not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        msg = f"{env_var} must be an integer, got: {raw!r}"
        raise ValueError(msg) from exc
    if value < 1:
        msg = f"{env_var} must be positive, got: {value}"
        raise ValueError(msg)
    return value


@dc.dataclass(frozen=True, slots=True)
class LookoutSettings:
    """Runtime configuration for the watcher service.

    Attributes
    ----------
    config_dir
        Directory holding ``watchers.yaml`` and ``watchers.lock.json``.
    github
        GitHub REST client configuration, including the API token.
    rate_budget
        Shared request quota and its rolling window.
    discord_webhook_url
        Discord webhook receiving notifications. When ``None`` notifications
        are written to the log instead.
    log_level
        Raw log level name, normalised by :func:`lookout.logging.configure_logging`.

    """

    config_dir: Path
    github: GitHubRestConfig
    rate_budget: RateBudget = dc.field(default_factory=RateBudget)
    discord_webhook_url: str | None = None
    log_level: str = "INFO"

    @property
    def watch_list_path(self) -> Path:
        """Return the watch-list file location."""
        return self.config_dir / WATCH_LIST_FILENAME

    @property
    def lock_path(self) -> Path:
        """Return the lock file location."""
        return self.config_dir / LOCK_FILENAME

    @classmethod
    def from_env(cls, config_dir: Path) -> LookoutSettings:
        """Create settings from environment variables.

        Reads the following environment variables:

        - ``LOOKOUT_GITHUB_TOKEN``: GitHub API token (required).
        - ``LOOKOUT_GITHUB_API_URL``: REST API base URL.
        - ``LOOKOUT_RATE_QUOTA``: Requests allowed per window (default 60).
        - ``LOOKOUT_RATE_WINDOW_MINUTES``: Window length (default 60).
        - ``LOOKOUT_DISCORD_WEBHOOK_URL``: Optional Discord webhook.
        - ``LOOKOUT_LOG_LEVEL``: Log level name (default ``INFO``).

        Raises
        ------
        GitHubConfigError
            If no GitHub token is configured.
        ValueError
            If a numeric variable is not a positive integer.

        """
        quota = _parse_positive_int("LOOKOUT_RATE_QUOTA", DEFAULT_QUOTA)
        window_minutes = _parse_positive_int(
            "LOOKOUT_RATE_WINDOW_MINUTES",
            int(DEFAULT_WINDOW.total_seconds() // 60),
        )
        webhook = os.environ.get("LOOKOUT_DISCORD_WEBHOOK_URL", "").strip()

        return cls(
            config_dir=Path(config_dir),
            github=GitHubRestConfig.from_env(),
            rate_budget=RateBudget(
                quota=quota, window=dt.timedelta(minutes=window_minutes)
            ),
            discord_webhook_url=webhook or None,
            log_level=os.environ.get("LOOKOUT_LOG_LEVEL", "INFO"),
        )
