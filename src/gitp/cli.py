"""
Command line interface for gitp.

This module defines the ``main`` click group used as the entry point of
the ``gitp`` command. The ``commit`` command orchestrates repository
detection, configuration loading, diff retrieval, policy resolution and
the interactive refinement loop before handing the accepted message to
Git. The remaining commands edit the user configuration. Exit codes are
listed below and are stable.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Callable

import click

from gitp import __version__
from gitp.config.loader import Config, ConfigError, load_config, save_config
from gitp.llm.commit_message_generator import CommitMessageGenerator
from gitp.llm.providers import PROVIDERS, LLMError
from gitp.models import GenerationResult
from gitp.policy.policy_model import resolve_policy
from gitp.update_check import fetch_latest_version, is_newer
from gitp.vcs.git_client import GitClient, GitError
from gitp.workflow.refinement_loop import LoopStatus, RefinementLoop

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). When logging is configured by
# the CLI, root handlers will be added and messages will propagate.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_NO_CHANGES = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_LLM_FAILURE = 7

GIT_ALIASES = {
    "c": "!gitp commit",
    "ca": "!gitp commit --add",
    "cs": "!gitp commit --smart",
    "cas": "!gitp commit --add --smart",
}


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Single-line progress message with elapsed time."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"⠋ {self.message}...", nl=False)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        mark = "✗" if exc_type else "✓"
        click.echo(f"\r{mark} {self.message} (took {elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}{click.style('✓', fg='green')} {message}")


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}{click.style('⚠', fg='yellow')} {message}")


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}{click.style('✗', fg='red')} {message}", err=True)


def show_result(result: GenerationResult) -> None:
    """Display a generated message/description pair."""
    click.echo("")
    click.echo(f"{click.style('Message:', fg='green')} {result.commit_message}")
    click.echo(f"{click.style('Description:', fg='green')} {result.commit_description}")


def ask_feedback() -> str:
    """Ask whether to accept; returns the feedback text (empty accepts)."""
    return click.prompt(
        "Accept? (Press Enter to accept, or provide feedback for improvement)",
        default="",
        show_default=False,
    )


# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------

def _enable_package_logging() -> None:
    """Let gitp module loggers propagate to the handlers configured above."""
    for name, candidate in logging.Logger.manager.loggerDict.items():
        if name.startswith("gitp") and isinstance(candidate, logging.Logger):
            candidate.propagate = True


def _load_config_or_exit() -> Config:
    try:
        return load_config()
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


def _update_config(transform: Callable[[Config], Config], success_message: str) -> None:
    config = _load_config_or_exit()
    try:
        save_config(transform(config))
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    print_success(success_message)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="gitp")
def main(verbose: bool) -> None:
    """AI-assisted commit messages for staged Git changes."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    _enable_package_logging()
    latest = fetch_latest_version()
    if is_newer(latest, __version__):
        print_warning(
            f"A new version of gitp is available ({latest}). "
            "Update with: pip install --upgrade gitp"
        )


@main.command()
@click.option("--dry-run", is_flag=True, help="Generate the message without committing.")
@click.option("--no-verify", is_flag=True, help="Skip git commit hooks.")
@click.option("--add", "add", is_flag=True, help="Stage all changes before generating.")
@click.option("-y", "yes", is_flag=True, help="Accept the first generated message.")
@click.option("--smart", is_flag=True, help="Add static analysis context about changed files.")
def commit(dry_run: bool, no_verify: bool, add: bool, yes: bool, smart: bool) -> None:
    """Generate a commit message for the staged changes and commit them."""
    ctx = click.get_current_context(silent=True)
    try:
        config = _load_config_or_exit()
        missing = config.missing_fields()
        if missing:
            print_error(f"Missing configuration: {', '.join(missing)}")
            print_info("Use 'gitp set-provider', 'gitp set-model' and 'gitp set-api-key'.", indent=1)
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        cwd = Path.cwd()
        repo_root = GitClient.find_repo_root(cwd)
        if repo_root is None:
            print_error("This is not a Git repository.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        client = GitClient(repo_root)

        try:
            if add:
                client.stage_all()
            diff = client.get_staged_diff()
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        try:
            branch = client.get_current_branch()
        except GitError as exc:
            logger.debug("Branch lookup failed: %s", exc)
            print_error("Unable to get current branch name.")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        if not diff.strip():
            print_error(
                "No changes to commit. If they are not staged, run 'git add .' first "
                "or use the --add flag."
            )
            raise click.exceptions.Exit(EXIT_NO_CHANGES)

        policy = resolve_policy(branch, str(cwd), config)
        logger.debug("Resolved policy: %s", policy)
        generator = CommitMessageGenerator(config, policy, smart_mode=smart, repo_root=repo_root)

        def generate(history):
            with ProgressIndicator("Generating commit message"):
                return generator.generate(diff, branch, history)

        loop = RefinementLoop(
            generate=generate,
            present=show_result,
            ask_feedback=ask_feedback,
            auto_accept=yes,
        )
        try:
            outcome = loop.run()
        except LLMError as exc:
            print_error(f"LLM error: {exc}")
            raise click.exceptions.Exit(EXIT_LLM_FAILURE)

        if outcome.status is LoopStatus.EMPTY_RESULT:
            print_error("The model did not return a usable commit message.")
            raise click.exceptions.Exit(EXIT_LLM_FAILURE)
        if outcome.status is LoopStatus.CEILING_REACHED:
            print_warning("Proceeding with the last generated commit message.")

        if dry_run:
            print_warning("Dry-run enabled. Skipping commit.")
            raise click.exceptions.Exit(EXIT_SUCCESS)

        try:
            client.commit(
                outcome.result.commit_message,
                outcome.result.commit_description,
                no_verify=no_verify,
            )
        except GitError as exc:
            print_error(f"Failed to commit changes: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        print_success(f"Committed: {outcome.result.commit_message}")
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except click.exceptions.Abort:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)


@main.command("set-api-key")
@click.argument("key")
def set_api_key(key: str) -> None:
    """Set the API key."""
    _update_config(lambda config: replace(config, api_key=key), "API key saved.")


@main.command("set-provider")
@click.argument("provider", type=click.Choice(sorted(PROVIDERS), case_sensitive=False))
def set_provider(provider: str) -> None:
    """Set the provider."""
    _update_config(
        lambda config: replace(config, provider=provider.lower()),
        f"Provider set to {provider.lower()}.",
    )


@main.command("set-model")
@click.argument("model")
def set_model(model: str) -> None:
    """Set the model."""
    _update_config(lambda config: replace(config, model=model), f"Model set to {model}.")


@main.command("set-base-url")
@click.argument("url")
def set_base_url(url: str) -> None:
    """Set a custom endpoint for the provider."""
    _update_config(lambda config: replace(config, base_url=url), f"Base URL set to {url}.")


@main.command("set-default-ticket")
@click.argument("ticket")
def set_default_ticket(ticket: str) -> None:
    """Set the default ticket when no ticket is found."""
    _update_config(
        lambda config: replace(config, default_ticket=ticket),
        f"Default ticket set to {ticket}.",
    )


@main.command("set-default-ticket-for")
@click.argument("path")
@click.argument("ticket")
def set_default_ticket_for(path: str, ticket: str) -> None:
    """Set the default ticket for a specific path."""
    _update_config(
        lambda config: config.with_default_ticket_for(path, ticket),
        f"Default ticket for {path} set to {ticket}.",
    )


@main.command("set-conventional-commits-for")
@click.argument("path")
def set_conventional_commits_for(path: str) -> None:
    """Add a path to use conventional commits format."""
    config = _load_config_or_exit()
    if any(entry.path == path for entry in config.use_conventional_commits_in):
        print_warning("Path already configured for conventional commits.")
        return
    _update_config(
        lambda current: current.with_conventional_path(path),
        "Path added to conventional commits configuration.",
    )


@main.command("remove-conventional-commits-for")
@click.argument("path")
def remove_conventional_commits_for(path: str) -> None:
    """Remove a path from conventional commits format."""
    config = _load_config_or_exit()
    if not any(entry.path == path for entry in config.use_conventional_commits_in):
        print_warning("Path not found in conventional commits configuration.")
        return
    _update_config(
        lambda current: current.without_conventional_path(path),
        "Path removed from conventional commits configuration.",
    )


@main.command("list-conventional-commits")
def list_conventional_commits() -> None:
    """List all paths configured for conventional commits."""
    config = _load_config_or_exit()
    if not config.use_conventional_commits_in:
        print_warning("No paths configured for conventional commits.")
        return
    click.echo("Paths configured for conventional commits:")
    for entry in config.use_conventional_commits_in:
        click.echo(f"  - {entry.path}")


@main.command("add-alias")
def add_alias() -> None:
    """Add gitp aliases to the global git config."""
    client = GitClient(Path.cwd())
    try:
        for name, command in GIT_ALIASES.items():
            client.add_global_alias(name, command)
    except GitError as exc:
        print_error(f"Failed to add aliases: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    print_success("Aliases added to git config.")
    click.echo("You can now use:")
    click.echo("  git c   - commit")
    click.echo("  git ca  - commit with add")
    click.echo("  git cs  - commit with smart context")
    click.echo("  git cas - commit with add and smart context")

