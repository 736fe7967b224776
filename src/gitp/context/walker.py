"""
Project tree walking for the "used by" cross references.

:func:`iter_source_files` lazily yields candidate files depth first, in
sorted directory-entry order so results are reproducible. Exclusions and
extensions are plain data passed by the caller.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePath
from typing import FrozenSet, Iterable, Iterator, List, Optional

from gitp.context.extractors import SCRIPT_EXTENSIONS, extract_imports


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist", "build", "coverage"})
MAX_IMPORTERS = 5


def iter_source_files(
    root: Path,
    extensions: FrozenSet[str] = SCRIPT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> Iterator[Path]:
    """Yield files under ``root`` with one of ``extensions``.

    Directories named in ``excluded_dirs`` are not entered. Directories
    that cannot be listed are skipped.
    """
    excluded = frozenset(excluded_dirs)
    try:
        with os.scandir(root) as scan:
            entries = sorted(scan, key=lambda entry: entry.name)
    except OSError as exc:
        logger.debug("Skipping unreadable directory %s: %s", root, exc)
        return

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in excluded:
                    yield from iter_source_files(Path(entry.path), extensions, excluded)
            elif entry.is_file() and PurePath(entry.name).suffix in extensions:
                yield Path(entry.path)
        except OSError as exc:
            logger.debug("Skipping %s: %s", entry.path, exc)


def find_who_imports(
    target_file: str,
    root: Optional[Path] = None,
    limit: int = MAX_IMPORTERS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> List[Path]:
    """Return up to ``limit`` project files that import ``target_file``.

    A file counts as an importer when one of its import targets contains
    the target's base name (without extension). Results keep walk order.
    """
    root = root or Path.cwd()
    target_name = PurePath(target_file).stem
    target_path = (root / target_file).resolve()
    importers: List[Path] = []
    for candidate in iter_source_files(root, excluded_dirs=excluded_dirs):
        if len(importers) >= limit:
            break
        if candidate.resolve() == target_path:
            continue
        try:
            content = candidate.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            continue
        if target_name not in content:
            continue
        if any(target_name in imported for imported in extract_imports(content)):
            importers.append(candidate)
    return importers
