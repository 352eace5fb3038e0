"""Watch-list loading, lock file persistence, and environment settings."""

from __future__ import annotations

from .loader import WATCH_LIST_FILENAME, WatchConfig, load_watch_config
from .lockfile import LOCK_FILENAME, LockFileStore, decode_lock, encode_lock
from .settings import LookoutSettings

__all__ = [
    "LOCK_FILENAME",
    "WATCH_LIST_FILENAME",
    "LockFileStore",
    "LookoutSettings",
    "WatchConfig",
    "decode_lock",
    "encode_lock",
    "load_watch_config",
]
