"""Unit tests for scan error categorisation and structured scan events."""

from __future__ import annotations

import datetime as dt

import httpx
import pytest

from lookout.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    MalformedDataError,
    ScanThrottledError,
    ScanTransportError,
)
from lookout.github.observability import (
    ErrorCategory,
    ScanEventLogger,
    ScanEventType,
    ScanRunContext,
    categorize_error,
)
from tests.helpers.log_capture import capture_module_logs

_MODULE = "lookout.github.observability"


class TestCategorizeError:
    """Tests for error categorization."""

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (ScanThrottledError("octo/reef", dt.timedelta(minutes=5)), ErrorCategory.RATE_LIMITED),
            (
                ScanTransportError("octo/reef", httpx.ReadTimeout("slow")),
                ErrorCategory.TRANSIENT,
            ),
            (
                ScanTransportError("octo/reef", RuntimeError("x"), status_code=503),
                ErrorCategory.TRANSIENT,
            ),
            (
                ScanTransportError("octo/reef", RuntimeError("x"), status_code=404),
                ErrorCategory.CLIENT_ERROR,
            ),
            (GitHubAPIError.http_error(502, "/repos"), ErrorCategory.TRANSIENT),
            (GitHubAPIError.http_error(401, "/repos"), ErrorCategory.CLIENT_ERROR),
            (
                MalformedDataError.unsupported_url("octo/reef", "x"),
                ErrorCategory.SCHEMA_DRIFT,
            ),
            (
                GitHubResponseShapeError.unexpected("/repos", "a list"),
                ErrorCategory.SCHEMA_DRIFT,
            ),
            (GitHubConfigError.missing_token(), ErrorCategory.CONFIGURATION),
            (RuntimeError("unexpected"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, exc: BaseException, expected: ErrorCategory) -> None:
        """Each failure maps onto its alerting category."""
        assert categorize_error(exc) == expected


class TestScanEventLogger:
    """Tests for ScanEventLogger structured logging."""

    @pytest.fixture
    def context(self) -> ScanRunContext:
        """Return a sample scan context."""
        return ScanRunContext(
            project="octo/reef",
            since=dt.datetime(2025, 1, 15, 11, 0, tzinfo=dt.UTC),
            started_at=dt.datetime(2025, 1, 15, 12, 0, tzinfo=dt.UTC),
        )

    def test_started_event(self, context: ScanRunContext) -> None:
        """Scan start records the watermark in use."""
        with capture_module_logs(_MODULE) as capture:
            ScanEventLogger().log_scan_started(context)

        record = capture.records[0]
        assert record.level == "INFO"
        assert record.message.startswith(f"[{ScanEventType.SCAN_STARTED}]")
        assert "since=2025-01-15T11:00:00+00:00" in record.message

    def test_completed_event(self, context: ScanRunContext) -> None:
        """Completion includes duration and commit count."""
        with capture_module_logs(_MODULE) as capture:
            ScanEventLogger().log_scan_completed(context, 4, dt.timedelta(seconds=1.25))

        record = capture.records[0]
        assert record.level == "INFO"
        assert "[scan.completed] project=octo/reef" in record.message
        assert "duration_seconds=1.250 commits_found=4" in record.message

    def test_throttled_event_is_warning(self, context: ScanRunContext) -> None:
        """Throttling logs the wait at WARNING level."""
        error = ScanThrottledError("octo/reef", dt.timedelta(minutes=12))
        with capture_module_logs(_MODULE) as capture:
            ScanEventLogger().log_scan_throttled(context, error)

        record = capture.records[0]
        assert record.level == "WARNING"
        assert "retry_after_seconds=720" in record.message

    def test_failed_event_includes_category(self, context: ScanRunContext) -> None:
        """Failures carry type, category, message, and the exception."""
        error = MalformedDataError.unsupported_url("octo/reef", "https://x")
        with capture_module_logs(_MODULE) as capture:
            ScanEventLogger().log_scan_failed(context, error, dt.timedelta(seconds=2))

        record = capture.records[0]
        assert record.level == "ERROR"
        assert "error_type=MalformedDataError" in record.message
        assert "error_category=schema_drift" in record.message
        assert "unsupported GitHub URL" in record.message
        assert record.exc_info is error
