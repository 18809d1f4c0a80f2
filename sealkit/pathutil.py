from __future__ import annotations

import os
import re
from typing import List, Optional

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def split_archive_path(p: str) -> List[str]:
    """Split a stored archive path into segments.

    Rules:
    - Convert backslashes to slashes
    - Drop empty and '.' segments
    - Keep '..' segments (they are judged after joining)
    """
    p = p.replace("\\", "/")
    return [q for q in p.split("/") if q not in ("", ".")]


def is_absolute_archive_path(p: str) -> bool:
    p = p.replace("\\", "/")
    return p.startswith("/") or bool(_DRIVE_RE.match(p))


def strip_components(p: str, count: int) -> str:
    """Drop ``count`` leading segments from ``p``; returns '' if nothing is left."""
    if count < 0:
        raise ValueError("strip count must be non-negative")
    return "/".join(split_archive_path(p)[count:])


def is_within(root: str, path: str) -> bool:
    """True if normalized ``path`` equals ``root`` or is nested under it."""
    root = os.path.normpath(root)
    path = os.path.normpath(path)
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def sanitize(destination_root: str, raw_entry_path: str, strip_count: int = 0) -> Optional[str]:
    """Map a stored archive path to a safe absolute path under ``destination_root``.

    Returns None when the entry must not be materialized: the stored path is
    absolute, nothing is left after stripping ``strip_count`` segments, or
    the joined and normalized path leaves the root. Purely lexical; the
    filesystem is not consulted.
    """
    if is_absolute_archive_path(raw_entry_path):
        return None
    rest = strip_components(raw_entry_path, strip_count)
    if not rest:
        return None
    root = os.path.normpath(os.path.abspath(destination_root))
    target = os.path.normpath(os.path.join(root, *rest.split("/")))
    if not is_within(root, target):
        return None
    return target


def symlink_target_is_contained(destination_root: str, link_path: str, target: str) -> bool:
    """Check that a symlink at ``link_path`` pointing to ``target`` stays inside the root."""
    if not target or is_absolute_archive_path(target):
        return False
    base = os.path.dirname(link_path)
    resolved = os.path.normpath(os.path.join(base, *split_archive_path(target)))
    return is_within(os.path.abspath(destination_root), resolved)


__all__ = [
    "sanitize",
    "strip_components",
    "split_archive_path",
    "is_absolute_archive_path",
    "is_within",
    "symlink_target_is_contained",
]
