r"""JSON lock file holding the exported state of every watcher.

The lock file sits next to the watch-list and maps each project id to its
:class:`~lookout.watch.models.WatcherSnapshot`::

    {"octo/reef": {"api": "github", "project": "octo/reef",
                   "scan_interval_min": 30,
                   "last_commit_scan_at": "2025-01-15T12:00:00Z",
                   "status": "running"}}

Writes go through a temporary sibling file replaced in one step, so readers
never observe a half-written document.
"""

from __future__ import annotations

import asyncio
import os
import typing as typ
from pathlib import Path

import msgspec

from lookout.watch.errors import WatchConfigError
from lookout.watch.models import WatcherSnapshot
from lookout.watch.observability import WatchEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

LOCK_FILENAME = "watchers.lock.json"

_LOCK_TYPE = dict[str, WatcherSnapshot]


def decode_lock(data: bytes) -> dict[str, WatcherSnapshot]:
    """Decode lock file bytes, rejecting entries keyed by the wrong project."""
    try:
        snapshots = msgspec.json.decode(data, type=_LOCK_TYPE)
    except msgspec.DecodeError as exc:
        raise WatchConfigError([f"invalid lock file: {exc}"]) from exc

    issues = [
        f"lock entry '{key}' describes project '{snapshot.project}'"
        for key, snapshot in snapshots.items()
        if key != snapshot.project
    ]
    if issues:
        raise WatchConfigError(issues)
    return snapshots


def encode_lock(snapshots: cabc.Mapping[str, WatcherSnapshot]) -> bytes:
    """Encode snapshots as an indented JSON document."""
    return msgspec.json.format(msgspec.json.encode(dict(snapshots)), indent=2)


class LockFileStore:
    """Load and atomically rewrite the watcher lock file."""

    def __init__(
        self, path: Path, *, event_logger: WatchEventLogger | None = None
    ) -> None:
        """Bind the store to ``path``; the file need not exist yet."""
        self._path = Path(path)
        self._event_logger = event_logger or WatchEventLogger()

    @property
    def path(self) -> Path:
        """Return the lock file location."""
        return self._path

    def load(self) -> dict[str, WatcherSnapshot]:
        """Return the persisted snapshots, or an empty mapping on first run."""
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            return {}
        return decode_lock(data)

    def save(self, snapshots: cabc.Mapping[str, WatcherSnapshot]) -> bool:
        """Persist ``snapshots``; returns False when there was nothing to write."""
        if not snapshots:
            self._event_logger.log_lock_skipped(self._path)
            return False

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_bytes(encode_lock(snapshots))
        os.replace(tmp_path, self._path)
        self._event_logger.log_lock_written(self._path, len(snapshots))
        return True

    async def save_async(self, snapshots: cabc.Mapping[str, WatcherSnapshot]) -> bool:
        """Persist ``snapshots`` without blocking the event loop."""
        return await asyncio.to_thread(self.save, dict(snapshots))
