"""GitHub client and scan errors."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, route: str) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"GitHub REST HTTP {status_code} for {route}", status_code=status_code)


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub REST payload does not have the expected shape."""

    @classmethod
    def unexpected(cls, route: str, expected: str) -> GitHubResponseShapeError:
        """Return an error for a payload of the wrong JSON type."""
        return cls(f"GitHub REST response for {route} is not {expected}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no GitHub token is configured."""
        return cls("LOOKOUT_GITHUB_TOKEN is required for the GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")


class ScanError(Exception):
    """Base class for failures of a single repository scan attempt.

    A scan error never advances the project's watermark; the watcher logs it
    and waits for its next tick.
    """

    def __init__(self, message: str, *, project: str) -> None:
        """Record the project whose scan failed."""
        self.project = project
        super().__init__(message)


class ScanThrottledError(ScanError):
    """Raised when the shared request budget refuses a scan.

    Attributes
    ----------
    retry_after
        Minimum wait before the budget can accept another request.

    """

    def __init__(self, project: str, retry_after: dt.timedelta) -> None:
        """Record how long the caller has to wait."""
        self.retry_after = retry_after
        minutes = max(1, int(-(-retry_after.total_seconds() // 60)))
        super().__init__(
            f"too many GitHub requests, scan of {project} must wait "
            f"{minutes} minute(s)",
            project=project,
        )


class MalformedDataError(ScanError):
    """Raised when upstream commit data violates the expected shape."""

    @classmethod
    def unsupported_url(cls, project: str, url: object) -> MalformedDataError:
        """Return an error for a commit resource URL outside ``owner/name`` form."""
        return cls(f"unsupported GitHub URL {url!r}", project=project)

    @classmethod
    def missing_field(cls, project: str, field: str) -> MalformedDataError:
        """Return an error for a commit record lacking a required field."""
        return cls(f"commit record missing expected field: {field}", project=project)


class ScanTransportError(ScanError):
    """Raised when the outbound fetch fails at the network or HTTP level."""

    def __init__(
        self, project: str, cause: BaseException, *, status_code: int | None = None
    ) -> None:
        """Wrap the transport failure for ``project``."""
        self.status_code = status_code
        super().__init__(f"GitHub fetch for {project} failed: {cause}", project=project)
