"""
Selection of the conventional commit format by working directory.
"""

from __future__ import annotations

import logging
import re

from gitp.config.loader import Config


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def path_matches(pattern: str, current_path: str) -> bool:
    """Return True if ``current_path`` matches a configured path entry.

    The entry is tried as a regular expression first; an invalid
    expression falls back to a plain substring test.
    """
    try:
        return re.search(pattern, current_path) is not None
    except re.error:
        logger.debug("Invalid path pattern %r; using substring match", pattern)
        return pattern in current_path


def should_use_conventional_commits(current_path: str, config: Config) -> bool:
    """Return True if any conventional commit path entry matches ``current_path``."""
    return any(
        path_matches(entry.path, current_path) for entry in config.use_conventional_commits_in
    )
