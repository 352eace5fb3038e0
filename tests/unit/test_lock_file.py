"""Unit tests for the JSON lock file store."""

from __future__ import annotations

import asyncio
import json
import typing as typ

import pytest

from lookout.config.lockfile import LockFileStore, decode_lock, encode_lock
from lookout.watch.errors import WatchConfigError
from lookout.watch.models import WatcherSnapshot, WatcherStatus
from tests.helpers.log_capture import capture_module_logs
from tests.helpers.watch_fakes import T0

if typ.TYPE_CHECKING:
    from pathlib import Path


def _snapshot(project: str = "octo/reef", **overrides: object) -> WatcherSnapshot:
    fields: dict[str, typ.Any] = {
        "api": "github",
        "project": project,
        "scan_interval_min": 30,
        "last_commit_scan_at": T0,
        "status": WatcherStatus.RUNNING,
    }
    fields.update(overrides)
    return WatcherSnapshot(**fields)


def test_encoded_lock_uses_snapshot_field_names() -> None:
    """The lock document is keyed by project with flat snapshot fields."""
    document = json.loads(encode_lock({"octo/reef": _snapshot()}))

    assert document == {
        "octo/reef": {
            "api": "github",
            "project": "octo/reef",
            "scan_interval_min": 30,
            "last_commit_scan_at": "2025-01-15T12:00:00Z",
            "status": "running",
        }
    }


def test_save_then_load_restores_snapshots(tmp_path: Path) -> None:
    """Snapshots survive a write and a fresh read."""
    store = LockFileStore(tmp_path / "watchers.lock.json")
    snapshots = {
        "octo/reef": _snapshot(),
        "octo/kelp": _snapshot("octo/kelp", status=WatcherStatus.STOPPED),
    }

    assert store.save(snapshots) is True
    restored = LockFileStore(store.path).load()

    assert restored == snapshots
    assert restored["octo/reef"].last_commit_scan_at.tzinfo is not None


def test_save_replaces_atomically(tmp_path: Path) -> None:
    """No temporary file is left behind and parents are created."""
    path = tmp_path / "nested" / "watchers.lock.json"
    store = LockFileStore(path)

    store.save({"octo/reef": _snapshot()})
    store.save({"octo/reef": _snapshot(scan_interval_min=45)})

    assert LockFileStore(path).load()["octo/reef"].scan_interval_min == 45
    assert sorted(child.name for child in path.parent.iterdir()) == [
        "watchers.lock.json"
    ]


def test_empty_export_is_not_written(tmp_path: Path) -> None:
    """An empty export leaves any previous lock file untouched."""
    path = tmp_path / "watchers.lock.json"
    store = LockFileStore(path)
    store.save({"octo/reef": _snapshot()})
    before = path.read_bytes()

    with capture_module_logs("lookout.watch.observability") as capture:
        assert store.save({}) is False

    assert path.read_bytes() == before
    assert "[lock.skipped]" in capture.records[0].message


def test_missing_lock_is_first_run(tmp_path: Path) -> None:
    """No lock file means no prior snapshot."""
    assert LockFileStore(tmp_path / "watchers.lock.json").load() == {}


@pytest.mark.parametrize(
    ("content", "fragment"),
    [
        (b"{not json", "invalid lock file"),
        (b'{"octo/reef": {"project": "octo/reef"}}', "invalid lock file"),
        (
            b'{"octo/reef": {"api": "github", "project": "octo/reef", '
            b'"scan_interval_min": 30, "last_commit_scan_at": "2025-01-15T12:00:00"}}',
            "invalid lock file",
        ),
        (
            b'{"octo/reef": {"api": "github", "project": "octo/kelp", '
            b'"scan_interval_min": 30, "last_commit_scan_at": "2025-01-15T12:00:00Z"}}',
            "describes project 'octo/kelp'",
        ),
    ],
)
def test_decode_rejects_unusable_documents(content: bytes, fragment: str) -> None:
    """Corrupt, incomplete, naive, or mis-keyed entries are refused."""
    with pytest.raises(WatchConfigError, match=fragment):
        decode_lock(content)


def test_decode_defaults_status_to_stopped() -> None:
    """Entries without a status load as stopped."""
    snapshots = decode_lock(
        b'{"octo/reef": {"api": "github", "project": "octo/reef", '
        b'"scan_interval_min": 30, "last_commit_scan_at": "2025-01-15T12:00:00Z"}}'
    )
    assert snapshots["octo/reef"].status is WatcherStatus.STOPPED


@pytest.mark.asyncio
async def test_save_async_writes_off_loop(tmp_path: Path) -> None:
    """The async variant persists the same document."""
    store = LockFileStore(tmp_path / "watchers.lock.json")

    written = await store.save_async({"octo/reef": _snapshot()})
    await asyncio.sleep(0)

    assert written is True
    assert store.load() == {"octo/reef": _snapshot()}
