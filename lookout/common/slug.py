"""Project identifier helpers.

Watched projects are keyed by GitHub ``owner/name`` identifiers. Each segment
is restricted to the characters GitHub accepts in owner and repository names.
"""

from __future__ import annotations

import re

SEGMENT_CHARS = r"[A-Za-z0-9_.-]+"
PROJECT_ID_PATTERN = re.compile(rf"^(?P<owner>{SEGMENT_CHARS})/(?P<name>{SEGMENT_CHARS})$")


def project_id(owner: str, name: str) -> str:
    """Build a project identifier from owner and name.

    Examples
    --------
    >>> project_id("octo", "reef")
    'octo/reef'

    """
    return f"{owner}/{name}"


def parse_project_id(value: str) -> tuple[str, str]:
    """Split an ``owner/name`` identifier.

    Raises
    ------
    ValueError
        If ``value`` is not a single ``owner/name`` pair of valid segments.

    Examples
    --------
    >>> parse_project_id("octo/reef")
    ('octo', 'reef')

    """
    match = PROJECT_ID_PATTERN.match(value)
    if match is None:
        msg = f"Invalid project id: expected 'owner/name', got {value!r}"
        raise ValueError(msg)
    return match.group("owner"), match.group("name")


def is_project_id(value: str) -> bool:
    """Return True when ``value`` is a well-formed ``owner/name`` identifier."""
    return PROJECT_ID_PATTERN.match(value) is not None
