"""GitHub commit fetching, request budgeting, and scanning primitives."""

from __future__ import annotations

from .client import CommitFetcher, GitHubCommitsClient, GitHubRestConfig
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    MalformedDataError,
    ScanError,
    ScanThrottledError,
    ScanTransportError,
)
from .models import NormalizedCommit
from .observability import (
    ErrorCategory,
    ScanEventLogger,
    ScanEventType,
    ScanRunContext,
    categorize_error,
)
from .ratelimit import RateBudget, RateLimitDecision, RateLimitedClient
from .scanner import RepositoryScanner, normalize_commit

__all__ = [
    "CommitFetcher",
    "ErrorCategory",
    "GitHubAPIError",
    "GitHubCommitsClient",
    "GitHubConfigError",
    "GitHubResponseShapeError",
    "GitHubRestConfig",
    "MalformedDataError",
    "NormalizedCommit",
    "RateBudget",
    "RateLimitDecision",
    "RateLimitedClient",
    "RepositoryScanner",
    "ScanError",
    "ScanEventLogger",
    "ScanEventType",
    "ScanRunContext",
    "ScanThrottledError",
    "ScanTransportError",
    "categorize_error",
    "normalize_commit",
]
