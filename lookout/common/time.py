"""Common time utilities."""

from __future__ import annotations

import datetime as dt
import typing as typ

Clock: typ.TypeAlias = typ.Callable[[], dt.datetime]

COMMIT_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def ensure_tzaware(value: dt.datetime, *, field: str) -> dt.datetime:
    """Return ``value`` converted to UTC, rejecting naive datetimes."""
    if value.tzinfo is None:
        msg = f"{field} must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC)


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse a GitHub ISO 8601 timestamp such as ``2024-05-01T10:00:00Z``."""
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        msg = f"GitHub datetime missing timezone: {value}"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)


def format_commit_date(value: dt.datetime) -> str:
    """Render a commit timestamp as ``YYYY/MM/DD HH:MM:SS`` in UTC.

    Sub-second precision is dropped on purpose; notification footers and the
    lock file consumers rely on this exact shape.
    """
    return ensure_tzaware(value, field="value").strftime(COMMIT_DATE_FORMAT)
