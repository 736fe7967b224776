"""
Assembly of the smart context sent alongside the diff.

For each changed source file the gatherer reads the current content,
extracts a :class:`~gitp.context.extractors.FileContext`, looks up which
project files import it and renders a short block per file. Stylesheets
are associated with the changed component that shares their name. The
result is capped at :data:`MAX_CONTEXT_SIZE` characters.

Nothing in here is fatal: unreadable files are skipped and unexpected
errors are logged as warnings, keeping whatever was gathered.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Sequence

from gitp.context.extractors import (
    CLASS_EXTENSIONS,
    SCRIPT_EXTENSIONS,
    STYLE_EXTENSIONS,
    FileContext,
    extract_context,
    has_extension,
)
from gitp.context.walker import DEFAULT_EXCLUDED_DIRS, find_who_imports


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MAX_CONTEXT_SIZE = 50000
TRIM_MARKER = "\n... (context trimmed)"


def safe_read_file(path: Path) -> Optional[str]:
    """Return the text of ``path`` or ``None`` if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read %s: %s", path, exc)
        return None


def truncate_context(text: str, limit: int = MAX_CONTEXT_SIZE) -> str:
    """Cut ``text`` to ``limit`` characters and append :data:`TRIM_MARKER`.

    Text within the limit is returned unchanged.
    """
    if len(text) <= limit:
        return text
    return text[:limit] + TRIM_MARKER


def build_file_context(
    file_path: str,
    root: Path,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> Optional[FileContext]:
    """Read ``file_path`` below ``root`` and extract its context.

    Script sources also get their importers filled in. Returns ``None``
    when the file is unreadable or has no extractor.
    """
    content = safe_read_file(root / file_path)
    if content is None:
        return None
    context = extract_context(file_path, content)
    if context is None:
        return None
    if context.kind == "script" and context.symbol_name:
        importers = find_who_imports(file_path, root, excluded_dirs=excluded_dirs)
        context = replace(context, imported_by=tuple(str(path) for path in importers))
    return context


def _style_associations(changed_files: Sequence[str]) -> List[str]:
    blocks = []
    for style_file in changed_files:
        if not has_extension(style_file, STYLE_EXTENSIONS):
            continue
        base_name = PurePath(style_file).stem
        component = next(
            (
                path
                for path in changed_files
                if base_name in path and has_extension(path, SCRIPT_EXTENSIONS)
            ),
            None,
        )
        if component:
            blocks.append(
                f"\n### Style context:\n{PurePath(style_file).name} belongs to "
                f"{PurePath(component).name}"
            )
    return blocks


def gather_smart_context(
    diff_text: str,
    changed_files: Sequence[str],
    root: Optional[Path] = None,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> str:
    """Build the smart context for ``changed_files``.

    Parameters
    ----------
    diff_text : str
        The staged diff the files were taken from.
    changed_files : Sequence[str]
        Paths relative to ``root``, usually from
        :func:`gitp.diff.extract_changed_files`.
    root : Path, optional
        Repository root; defaults to the current directory.
    excluded_dirs : Iterable[str]
        Directory names skipped when looking for importers.

    Returns
    -------
    str
        One ``### Context for <file>`` block per file with findings, plus
        style associations, truncated to :data:`MAX_CONTEXT_SIZE`.
    """
    root = root or Path.cwd()
    blocks: List[str] = []
    logger.debug(
        "Gathering smart context for %d file(s) from a %d character diff",
        len(changed_files),
        len(diff_text),
    )

    try:
        for file_path in changed_files:
            if not has_extension(file_path, SCRIPT_EXTENSIONS | CLASS_EXTENSIONS):
                continue
            context = build_file_context(file_path, root, excluded_dirs)
            if context is None:
                continue
            lines = context.summary_lines()
            if lines:
                blocks.append(
                    f"\n### Context for {PurePath(file_path).name}:\n" + "\n".join(lines)
                )
        blocks.extend(_style_associations(changed_files))
    except Exception as exc:
        logger.warning("Error gathering smart context: %s", exc)

    return truncate_context("\n".join(blocks))
