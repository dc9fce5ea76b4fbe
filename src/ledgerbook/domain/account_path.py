"""Hierarchical account paths.

An account path is a string such as ``"Ausgaben : Büro : Material"``: a
sequence of segments joined by ``" : "``. Paths typed by users are normalized
to that canonical form before they are stored or compared.
"""

import re
from typing import Optional

from ledgerbook.domain.errors import (
    EmptyPathError,
    ExceedsMaxDepthError,
    InvalidSegmentError,
    ValidationError,
)

SEPARATOR = " : "
SEPARATOR_CHAR = ":"
DEFAULT_MAX_DEPTH = 6

_SEPARATOR_RE = re.compile(r"\s*:\s*")

DISPLAY_STYLES = ("arrow", "leaf_with_depth", "compact")


def normalize(path: str) -> str:
    """Normalize a path to the canonical ``"A : B : C"`` form.

    Whitespace around separators is collapsed and empty segments are
    dropped, so normalize(normalize(p)) == normalize(p).
    """
    parts = (part.strip() for part in _SEPARATOR_RE.split(path))
    return SEPARATOR.join(part for part in parts if part)


def validate(path: str, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Validate a path as typed by a user.

    Empty segments are looked for on the raw text, before normalization, so
    a doubled separator such as ``"Ausgaben::Büro"`` is reported rather than
    silently collapsed.

    Args:
        path: Raw account path
        max_depth: Maximum number of segments

    Raises:
        EmptyPathError: If the path is blank
        InvalidSegmentError: If a segment is empty or contains the separator
        ExceedsMaxDepthError: If the path has more than max_depth segments
    """
    if path is None or path.strip() == "":
        raise EmptyPathError()

    raw_segments = [segment.strip() for segment in _SEPARATOR_RE.split(path.strip())]
    for segment in raw_segments:
        if segment == "" or SEPARATOR_CHAR in segment:
            raise InvalidSegmentError(segment)

    if len(raw_segments) > max_depth:
        raise ExceedsMaxDepthError(max_depth)


def is_valid(path: str, max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
    """Return True if validate() accepts the path."""
    try:
        validate(path, max_depth)
    except ValidationError:
        return False
    return True


def segments(path: str) -> list[str]:
    """Split a path into its segments (empty list for an empty path)."""
    normalized = normalize(path)
    if normalized == "":
        return []
    return normalized.split(SEPARATOR)


def depth(path: str) -> int:
    """Return the number of segments; root accounts have depth 1."""
    return len(segments(path))


def leaf(path: str) -> Optional[str]:
    """Return the last segment, or None for an empty path."""
    parts = segments(path)
    return parts[-1] if parts else None


def parent(path: str) -> Optional[str]:
    """Return the parent path, or None for root and empty paths."""
    parts = segments(path)
    if len(parts) <= 1:
        return None
    return SEPARATOR.join(parts[:-1])


def ancestors(path: str) -> list[str]:
    """Return all ancestor paths from the root down to the path itself."""
    parts = segments(path)
    return [SEPARATOR.join(parts[: index + 1]) for index in range(len(parts))]


def ancestors_without_self(path: str) -> list[str]:
    """Return all ancestor paths from the root down to the direct parent."""
    return ancestors(path)[:-1]


def join(parent_path: str, child: str) -> str:
    """Append a child segment (or sub-path) to a parent path.

    If either side is empty the other is returned unchanged.
    """
    parent_path = normalize(parent_path)
    child = normalize(child)
    if parent_path == "":
        return child
    if child == "":
        return parent_path
    return parent_path + SEPARATOR + child


def is_ancestor(ancestor: str, descendant: str) -> bool:
    """Return True if ``ancestor`` lies strictly above ``descendant``.

    A path is never its own ancestor.
    """
    ancestor = normalize(ancestor)
    descendant = normalize(descendant)
    if ancestor == "" or ancestor == descendant:
        return False
    return descendant.startswith(ancestor + SEPARATOR)


def is_descendant(descendant: str, ancestor: str) -> bool:
    """Inverse of is_ancestor()."""
    return is_ancestor(ancestor, descendant)


def is_sibling(first: str, second: str) -> bool:
    """Return True if two distinct paths share a parent.

    Root accounts are siblings of each other.
    """
    first = normalize(first)
    second = normalize(second)
    if first == second:
        return False
    return parent(first) == parent(second)


def to_uppercase(path: str) -> str:
    """Return the normalized path with every segment upper-cased."""
    return SEPARATOR.join(segment.upper() for segment in segments(path))


def display(path: str, style: str = "arrow") -> str:
    """Render a path for humans.

    Styles:
        arrow: "Ausgaben → Büro → Material"
        leaf_with_depth: "    └── Material" (two spaces per level above the leaf)
        compact: "A : B : Material" (initials of ancestors, full leaf)
    """
    parts = segments(path)
    if style == "arrow":
        return " → ".join(parts)
    if style == "leaf_with_depth":
        if not parts:
            return ""
        return "  " * (len(parts) - 1) + f"└── {parts[-1]}"
    if style == "compact":
        if len(parts) <= 1:
            return "".join(parts)
        return SEPARATOR.join([segment[0] for segment in parts[:-1]] + [parts[-1]])
    raise ValidationError(f"Unknown display style '{style}'. Supported styles: {', '.join(DISPLAY_STYLES)}")
