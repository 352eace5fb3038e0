"""YAML loader for the declarative watch-list.

The watch-list lives in ``watchers.yaml`` inside the configuration
directory::

    version: 1
    watchers:
      - project: octo/reef
        scan_interval_min: 30
      - project: octo/kelp
        scan_interval_min: 60
        api: github

Every entry is converted into a :class:`WatchedProjectSpec`; unknown keys,
missing keys, duplicate projects and unsupported APIs are rejected before any
watcher starts.
"""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from lookout.watch.errors import WatchConfigError
from lookout.watch.models import SUPPORTED_APIS, WatchedProjectSpec

YAML_VERSION = (1, 2)
WATCH_LIST_FILENAME = "watchers.yaml"


class WatchConfig(msgspec.Struct, kw_only=True, forbid_unknown_fields=True):
    """Top-level watch-list document."""

    version: int = 1
    watchers: list[WatchedProjectSpec] = msgspec.field(default_factory=list)


def validate_watch_config(config: WatchConfig) -> WatchConfig:
    """Check cross-entry rules, returning ``config`` when all pass."""
    issues: list[str] = []
    if config.version < 1:
        issues.append("watch-list version must be >= 1")
    if not config.watchers:
        issues.append("watch-list declares no watchers")

    seen: set[str] = set()
    for spec in config.watchers:
        if spec.project in seen:
            issues.append(f"duplicate watcher for project '{spec.project}'")
        seen.add(spec.project)
        if spec.api not in SUPPORTED_APIS:
            issues.append(
                f"watcher {spec.project} uses unsupported api '{spec.api}'"
            )

    if issues:
        raise WatchConfigError(issues)
    return config


def load_watch_config(path: Path | str) -> WatchConfig:
    """Parse and validate a watch-list YAML file.

    Raises
    ------
    WatchConfigError
        If the file is missing, unparsable, empty, or invalid.

    """
    path_obj = Path(path)
    if not path_obj.is_file():
        raise WatchConfigError([f"missing the watch-list file {path_obj}"])

    try:
        loaded = _yaml().load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise WatchConfigError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise WatchConfigError(["watch-list file is empty"])

    try:
        config = msgspec.convert(loaded, type=WatchConfig)
    except msgspec.ValidationError as exc:
        raise WatchConfigError([f"schema validation failed: {exc}"]) from exc

    return validate_watch_config(config)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
