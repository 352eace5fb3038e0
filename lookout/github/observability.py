"""Observability primitives for repository scans.

Provides structured logging and error categorisation for scan attempts. All
events are emitted as ``[event.type] key=value`` log lines suitable for
parsing by log aggregators.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from lookout.logging import get_logger, log_error, log_info, log_warning

from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    MalformedDataError,
    ScanThrottledError,
    ScanTransportError,
)

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500


class ScanEventType(enum.StrEnum):
    """Structured log event types for scan observability."""

    SCAN_STARTED = "scan.started"
    SCAN_COMPLETED = "scan.completed"
    SCAN_THROTTLED = "scan.throttled"
    SCAN_FAILED = "scan.failed"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class ScanRunContext:
    """Shared context for a single scan attempt."""

    project: str
    since: dt.datetime
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (ScanThrottledError, ErrorCategory.RATE_LIMITED),
    (MalformedDataError, ErrorCategory.SCHEMA_DRIFT),
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
)


def _status_category(status_code: int | None) -> ErrorCategory:
    if status_code is None or status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
        return ErrorCategory.TRANSIENT
    return ErrorCategory.CLIENT_ERROR


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Transport failures without a status code (timeouts, refused connections)
    and 5xx responses are transient; other HTTP statuses are client errors.
    """
    if isinstance(exc, ScanTransportError | GitHubAPIError):
        return _status_category(exc.status_code)

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class ScanEventLogger:
    """Emit structured scan events via femtologging."""

    def log_scan_started(self, context: ScanRunContext) -> None:
        """Log the start of a scan attempt."""
        log_info(
            logger,
            "[%s] project=%s since=%s started_at=%s",
            ScanEventType.SCAN_STARTED,
            context.project,
            context.since.isoformat(),
            context.started_at.isoformat(),
        )

    def log_scan_completed(
        self,
        context: ScanRunContext,
        commits_found: int,
        duration: dt.timedelta,
    ) -> None:
        """Log a successful scan with the number of new commits."""
        log_info(
            logger,
            "[%s] project=%s duration_seconds=%.3f commits_found=%d",
            ScanEventType.SCAN_COMPLETED,
            context.project,
            duration.total_seconds(),
            commits_found,
        )

    def log_scan_throttled(
        self, context: ScanRunContext, error: ScanThrottledError
    ) -> None:
        """Log a scan skipped because the request budget is exhausted."""
        log_warning(
            logger,
            "[%s] project=%s retry_after_seconds=%.0f",
            ScanEventType.SCAN_THROTTLED,
            context.project,
            error.retry_after.total_seconds(),
        )

    def log_scan_failed(
        self,
        context: ScanRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log a failed scan with error categorisation."""
        log_error(
            logger,
            "[%s] project=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            ScanEventType.SCAN_FAILED,
            context.project,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )
