"""
Git client implementation for gitp.

This module wraps the Git operations the commit assistant needs:
repository detection, reading the staged diff, staging everything,
resolving the current branch, committing and registering global
aliases. All subprocess calls go through :meth:`GitClient._run` so that
unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is inside a Git repository."""
        return GitClient.find_repo_root(path) is not None

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If Git cannot be started, or the command exits with a non-zero
            status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",  # Replace invalid characters instead of failing
            )
        except OSError as exc:
            logger.error("Could not run git: %s", exc)
            raise GitError(f"Could not run git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Diff and branch
    # ------------------------------------------------------------------
    def get_staged_diff(self) -> str:
        """Return the unified diff of the staged changes.

        An empty string means nothing is staged.
        """
        result = self._run(["diff", "--cached"], check=True)
        return result.stdout

    def get_current_branch(self) -> str:
        """Get the name of the current branch.

        Raises
        ------
        GitError
            If unable to determine the current branch.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], check=True)
        branch = result.stdout.strip()
        if not branch:
            raise GitError("Unable to determine the current branch")
        return branch

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------
    def stage_all(self) -> None:
        """Stage every change in the working tree (``git add .``)."""
        self._run(["add", "."], check=True)

    def commit(self, message: str, description: str = "", no_verify: bool = False) -> None:
        """Create a commit from ``message`` and ``description``.

        The description becomes the commit body, separated from the
        subject by a blank line. ``no_verify`` skips the commit hooks.
        """
        args = ["commit", "-m", message]
        if description:
            args += ["-m", description]
        if no_verify:
            args.append("--no-verify")
        self._run(args, check=True)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def add_global_alias(self, name: str, command: str) -> None:
        """Register ``git <name>`` as a global alias for ``command``."""
        self._run(["config", "--global", f"alias.{name}", command], check=True)
