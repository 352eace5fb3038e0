"""Typed domain models for GitHub commit scanning."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


@dataclasses.dataclass(frozen=True, slots=True)
class NormalizedCommit:
    """A newly observed commit, ready for notification delivery."""

    sha: str
    project: str
    author: str
    author_icon_url: str | None
    message: str
    url: str
    committed_at: dt.datetime
    date_label: str
    verified: bool
    signed: bool

    @property
    def short_sha(self) -> str:
        """Return the seven-character abbreviated commit id."""
        return self.sha[:7]
