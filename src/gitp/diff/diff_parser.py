"""
Parsing helpers for unified Git diffs.

A staged diff is made of per-file sections, each starting with a
``diff --git a/<old> b/<new>`` header. The functions here list the files
such a diff touches and drop the sections that belong to dependency lock
files, which are large, machine generated and carry no intent.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple


DIFF_HEADER_PREFIX = "diff --git"

LOCK_FILE_PATTERNS = (
    re.compile(r"package-lock\.json$"),
    re.compile(r"yarn\.lock$"),
    re.compile(r"pnpm-lock\.yaml$"),
    re.compile(r"composer\.lock$"),
    re.compile(r"Gemfile\.lock$"),
    re.compile(r"Pipfile\.lock$"),
    re.compile(r"poetry\.lock$"),
    re.compile(r"cargo\.lock$", re.IGNORECASE),
    re.compile(r"go\.sum$"),
    re.compile(r"mix\.lock$"),
)

_HEADER_PATH_RE = re.compile(r"^diff --git a/.+? b/(.+)$")


def is_lock_file(file_path: str) -> bool:
    """Return True if ``file_path`` names a known dependency lock file."""
    return any(pattern.search(file_path) for pattern in LOCK_FILE_PATTERNS)


def _header_path(line: str) -> Optional[str]:
    """Return the post-change path of a ``diff --git`` header, if any."""
    match = _HEADER_PATH_RE.match(line.rstrip("\r"))
    return match.group(1) if match else None


def extract_changed_files(diff_text: str) -> Tuple[str, ...]:
    """List the files changed in ``diff_text``, lock files excluded.

    Header lines without a recognizable ``b/`` path are skipped.
    """
    files = []
    for line in diff_text.splitlines():
        if not line.startswith(DIFF_HEADER_PREFIX):
            continue
        path = _header_path(line)
        if path and not is_lock_file(path):
            files.append(path)
    return tuple(files)


def filter_lock_files_from_diff(diff_text: str) -> str:
    """Remove the sections of lock files from ``diff_text``.

    A section runs from its ``diff --git`` header up to the next header.
    All other lines are kept in order with their original line endings.
    """
    kept = []
    skipping = False
    for line in diff_text.splitlines(keepends=True):
        if line.startswith(DIFF_HEADER_PREFIX):
            path = _header_path(line.rstrip("\n"))
            skipping = bool(path and is_lock_file(path))
        if not skipping:
            kept.append(line)
    return "".join(kept)
