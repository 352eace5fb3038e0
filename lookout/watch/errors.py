"""Watcher lifecycle and configuration errors."""

from __future__ import annotations


class AlreadyRegisteredError(RuntimeError):
    """Raised when a project already has a watcher in the registry."""

    @classmethod
    def for_project(cls, project: str) -> AlreadyRegisteredError:
        """Return an error naming the duplicate project."""
        return cls(f"unable to add the watcher {project!r}: already registered")


class AlreadyRunningError(RuntimeError):
    """Raised when starting a watcher that already owns a timer task."""

    @classmethod
    def for_project(cls, project: str) -> AlreadyRunningError:
        """Return an error for a second ``start`` of a running watcher."""
        return cls(f"unable to start the watcher {project!r}: timer already used")

    @classmethod
    def restart(cls, project: str) -> AlreadyRunningError:
        """Return an error for starting a watcher that was stopped."""
        return cls(
            f"unable to start the watcher {project!r}: stopped watchers cannot be "
            "restarted, build a new one from its snapshot"
        )


class WatchConfigError(ValueError):
    """Raised when the watch-list or lock file cannot be used at startup."""

    def __init__(self, issues: list[str]) -> None:
        """Capture the problems found whilst keeping an aggregated message."""
        super().__init__("\n".join(issues))
        self.issues = issues
