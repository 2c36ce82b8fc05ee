"""Slash-delimited path helpers for the virtual drive.

Paths are root-relative (``"Adobe/Photoshop"``) and the root itself is the
empty string. Every helper here is total over strings: malformed input is
normalized, never rejected. Rejection is the job of ``validation``.
"""

from __future__ import annotations

import re

ROOT = ""
SEPARATOR = "/"

_REPEATED_SEPARATORS = re.compile(r"/+")


def normalize(path: str | None) -> str:
    """Collapse repeated separators and drop a trailing one.

    ``"/"`` is kept as-is; empty or ``None`` input yields the root.
    """
    if not path or not isinstance(path, str):
        return ROOT
    if path == SEPARATOR:
        return SEPARATOR
    collapsed = _REPEATED_SEPARATORS.sub(SEPARATOR, path)
    if collapsed.endswith(SEPARATOR) and collapsed != SEPARATOR:
        collapsed = collapsed[:-1]
    return collapsed


def join(parent: str, name: str) -> str:
    """Return the path of ``name`` inside ``parent``."""
    if not parent:
        return name
    return f"{parent}{SEPARATOR}{name}"


def parent(path: str | None) -> str:
    """Strip the last segment. Single-segment paths return the root."""
    normalized = normalize(path)
    idx = normalized.rfind(SEPARATOR)
    if idx <= 0:
        return ROOT
    return normalized[:idx]


def basename(path: str | None) -> str:
    normalized = normalize(path)
    idx = normalized.rfind(SEPARATOR)
    if idx == -1:
        return normalized
    return normalized[idx + 1:]


def join_segments(*segments: str) -> str:
    """Join arbitrary segments, ignoring empty ones and stray slashes."""
    cleaned = [
        segment.strip(SEPARATOR)
        for segment in segments
        if segment and isinstance(segment, str)
    ]
    joined = SEPARATOR.join(s for s in cleaned if s)
    return _REPEATED_SEPARATORS.sub(SEPARATOR, joined)


def is_absolute(path: str) -> bool:
    return isinstance(path, str) and path.startswith(SEPARATOR)


def is_relative(path: str) -> bool:
    return isinstance(path, str) and not path.startswith(SEPARATOR)


def is_descendant(path: str, ancestor: str) -> bool:
    """True if ``path`` equals ``ancestor`` or lies underneath it.

    Matching is segment-aware: ``"AB"`` is not inside ``"A"``.
    """
    if ancestor == ROOT:
        return True
    return path == ancestor or path.startswith(ancestor + SEPARATOR)


def rewrite_prefix(path: str, old_prefix: str, new_prefix: str) -> str:
    """Replace a leading ``old_prefix`` of ``path`` with ``new_prefix``.

    Paths that do not start with ``old_prefix`` come back unchanged.
    """
    if not path.startswith(old_prefix):
        return path
    return new_prefix + path[len(old_prefix):]
