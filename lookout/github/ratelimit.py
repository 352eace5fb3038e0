"""Sliding-window request budget shared by every repository watcher.

Unauthenticated-style GitHub quotas allow a fixed number of requests per
rolling hour. :class:`RateLimitedClient` keeps the timestamp of each accepted
request, forgets those older than the window, and refuses new requests once
the quota is reached, telling the caller how long to wait.
"""

from __future__ import annotations

import collections
import dataclasses
import datetime as dt
import threading

from lookout.common.time import Clock, utcnow

DEFAULT_QUOTA = 60
DEFAULT_WINDOW = dt.timedelta(minutes=60)


@dataclasses.dataclass(frozen=True, slots=True)
class RateBudget:
    """Maximum number of requests accepted within a rolling window."""

    quota: int = DEFAULT_QUOTA
    window: dt.timedelta = DEFAULT_WINDOW

    def __post_init__(self) -> None:
        """Reject budgets that could never accept a request."""
        if self.quota < 1:
            msg = f"rate quota must be positive, got: {self.quota}"
            raise ValueError(msg)
        if self.window <= dt.timedelta(0):
            msg = f"rate window must be positive, got: {self.window}"
            raise ValueError(msg)


@dataclasses.dataclass(frozen=True, slots=True)
class ScanHistoryEntry:
    """One accepted request."""

    timestamp: dt.datetime
    target: str


@dataclasses.dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of :meth:`RateLimitedClient.try_acquire`."""

    allowed: bool
    retry_after: dt.timedelta = dt.timedelta(0)


class RateLimitedClient:
    """Thread-safe sliding-window request budget."""

    def __init__(self, budget: RateBudget | None = None, *, clock: Clock = utcnow) -> None:
        """Create an empty history for ``budget``."""
        self._budget = budget or RateBudget()
        self._clock = clock
        self._history: collections.deque[ScanHistoryEntry] = collections.deque()
        self._lock = threading.Lock()

    @property
    def budget(self) -> RateBudget:
        """Return the configured budget."""
        return self._budget

    @property
    def history_size(self) -> int:
        """Return the number of requests currently counted against the quota."""
        with self._lock:
            return len(self._history)

    def remaining(self) -> int:
        """Return how many requests would be accepted right now."""
        with self._lock:
            self._evict(self._clock())
            return self._budget.quota - len(self._history)

    def try_acquire(self, target: str) -> RateLimitDecision:
        """Record a request for ``target`` if the budget allows it.

        The wait reported on refusal is measured from the most recent accepted
        request, so it is long enough for the whole window to drain rather than
        just the oldest slot.
        """
        with self._lock:
            now = self._clock()
            self._evict(now)
            if len(self._history) < self._budget.quota:
                self._history.append(ScanHistoryEntry(timestamp=now, target=target))
                return RateLimitDecision(allowed=True)

            newest = self._history[-1]
            retry_after = newest.timestamp + self._budget.window - now
            return RateLimitDecision(allowed=False, retry_after=retry_after)

    def _evict(self, now: dt.datetime) -> None:
        # Entries are appended in clock order, so expired ones form a prefix.
        window = self._budget.window
        while self._history and now - self._history[0].timestamp >= window:
            self._history.popleft()
