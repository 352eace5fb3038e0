"""Render commits and reconciliation diffs as chat-friendly Markdown."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from lookout.github.models import NormalizedCommit
    from lookout.watch.models import WatchedProject
    from lookout.watch.reconcile import ReconciliationDiff

GITHUB_WEB_URL = "https://github.com"

COMMIT_COLOUR = 0x0099FF
DIFF_COLOUR = 0xC75820

# Discord embed limits
_DESCRIPTION_LIMIT = 4096
_FIELD_VALUE_LIMIT = 1024
_ELLIPSIS = "…"

NEW_SECTION = "New watchers"
CHANGED_SECTION = "Update watchers"
RETAINED_SECTION = "Retained watchers"


def project_url(project: str) -> str:
    """Return the GitHub web URL of ``project``."""
    return f"{GITHUB_WEB_URL}/{project}"


def truncate(text: str, limit: int) -> str:
    """Shorten ``text`` to at most ``limit`` characters."""
    if len(text) <= limit:
        return text
    return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS


def commit_title(commit: NormalizedCommit) -> str:
    """Return the headline for a commit notification."""
    return f"[{commit.project}] 1 new commit"


def commit_footer(commit: NormalizedCommit) -> str:
    """Return ``sha • verified • signed • date`` for a commit."""
    verified = "verified" if commit.verified else "unverified"
    signed = "signed" if commit.signed else "unsigned"
    return f"{commit.short_sha} • {verified} • {signed} • {commit.date_label}"


def render_commit_embed(commit: NormalizedCommit) -> dict[str, typ.Any]:
    """Build the Discord embed payload announcing one commit."""
    author: dict[str, typ.Any] = {"name": commit.author, "url": commit.url}
    if commit.author_icon_url:
        author["icon_url"] = commit.author_icon_url
    return {
        "color": COMMIT_COLOUR,
        "title": commit_title(commit),
        "url": commit.url,
        "author": author,
        "description": truncate(commit.message, _DESCRIPTION_LIMIT),
        "footer": {"text": commit_footer(commit)},
        "timestamp": commit.committed_at.isoformat(),
    }


def _project_lines(project: WatchedProject) -> list[str]:
    return [
        f"- **[{project.project}]({project_url(project.project)})**",
        f"  - **api**: `{project.api}`",
        f"  - **scan_interval_min**: `{project.scan_interval_min}`",
    ]


def render_diff_sections(diff: ReconciliationDiff) -> dict[str, str]:
    """Return the non-empty diff sections keyed by their heading.

    Changed fields read ``snapshot ⇒ declared``, oldest value first.
    """
    sections: dict[str, str] = {}

    if diff.new_projects:
        lines = [line for project in diff.new_projects for line in _project_lines(project)]
        sections[NEW_SECTION] = "\n".join(lines)

    if diff.changed_projects:
        lines = []
        for project, fields in diff.changed_projects.items():
            lines.append(f"- **{project}**")
            lines.extend(
                f"  - **{field}**: `{recorded}` ⇒ `{declared}`"
                for field, (declared, recorded) in fields.items()
            )
        sections[CHANGED_SECTION] = "\n".join(lines)

    if diff.retained_projects:
        lines = [
            line for project in diff.retained_projects for line in _project_lines(project)
        ]
        sections[RETAINED_SECTION] = "\n".join(lines)

    return sections


def render_diff_embed(diff: ReconciliationDiff) -> dict[str, typ.Any]:
    """Build the Discord embed payload summarising a reconciliation diff."""
    return {
        "color": DIFF_COLOUR,
        "title": "Configuration update",
        "description": "Update the configuration lock file",
        "author": {"name": "Lookout"},
        "fields": [
            {"name": name, "value": truncate(value, _FIELD_VALUE_LIMIT)}
            for name, value in render_diff_sections(diff).items()
        ],
    }


def render_diff_markdown(diff: ReconciliationDiff) -> str:
    """Render the whole diff as one Markdown document."""
    blocks = [
        f"### {name}\n{value}" for name, value in render_diff_sections(diff).items()
    ]
    return "\n\n".join(blocks)
