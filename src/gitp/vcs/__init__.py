"""
Version control integration.

gitp works on Git repositories only; :class:`GitClient` exposes the
handful of operations the commit command needs.
"""

from .git_client import GitClient, GitError  # noqa: F401
