"""
Diff utilities.

Helpers for reading the per-file structure of a unified Git diff and for
keeping dependency lock files out of what is sent to the model.
"""

from .diff_parser import (  # noqa: F401
    extract_changed_files,
    filter_lock_files_from_diff,
    is_lock_file,
)
