"""
Commit message generation using an LLM.

This module provides the :class:`CommitMessageGenerator` class, which
turns a staged diff into a commit message and description. One call to
:meth:`CommitMessageGenerator.generate` assembles the request context
(diff without lock files, branch name, smart context when enabled),
builds the prompt for the active policy and feedback history, queries
the configured backend and parses the labelled reply.

Transport failures surface as :class:`~gitp.llm.providers.LLMError`.
Missing configuration and unusable replies yield an empty
:class:`~gitp.models.GenerationResult` instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gitp.config.loader import Config
from gitp.context.gatherer import gather_smart_context
from gitp.diff.diff_parser import extract_changed_files, filter_lock_files_from_diff
from gitp.llm.prompt_builder import build_prompt
from gitp.llm.providers import query
from gitp.llm.response_parser import parse_response
from gitp.models import Attempt, GenerationResult
from gitp.policy.policy_model import Policy


logger = logging.getLogger(__name__)
# Attach a null handler to prevent logging errors when no handlers are
# configured on the root logger. Logs will propagate when configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class CommitMessageGenerator:
    """Generate commit messages for a staged diff.

    Parameters
    ----------
    config : Config
        Loaded configuration; provides provider, model and key.
    policy : Policy
        Conventional commit flag and ticket for this invocation.
    smart_mode : bool, optional
        Attach smart context about the changed files.
    repo_root : Path, optional
        Root the changed file paths are relative to.
    query_fn : callable, optional
        Replacement for :func:`gitp.llm.providers.query`.
    """

    def __init__(
        self,
        config: Config,
        policy: Policy,
        smart_mode: bool = False,
        repo_root: Optional[Path] = None,
        query_fn: Callable[..., str] = query,
    ) -> None:
        self.config = config
        self.policy = policy
        self.smart_mode = smart_mode
        self.repo_root = repo_root
        self.query_fn = query_fn

    def _build_context(self, diff: str, branch_name: str) -> List[str]:
        context = [filter_lock_files_from_diff(diff)]
        if branch_name:
            context.append(f"Current branch: {branch_name}")
        if self.smart_mode:
            logger.info("Gathering smart context...")
            smart_context = gather_smart_context(
                diff, extract_changed_files(diff), root=self.repo_root
            )
            if smart_context:
                context.append(smart_context)
        return context

    def generate(
        self,
        diff: str,
        branch_name: str = "",
        history: Sequence[Attempt] = (),
    ) -> GenerationResult:
        """Generate one commit message/description pair.

        Parameters
        ----------
        diff : str
            Staged changes in unified diff format.
        branch_name : str
            Current branch, passed to the model as context.
        history : Sequence[Attempt]
            Earlier rejected attempts, oldest first.

        Returns
        -------
        GenerationResult
            The parsed pair, or an empty result when configuration is
            incomplete or the reply lacks the labelled lines.

        Raises
        ------
        LLMError
            If the backend request fails.
        """
        missing = self.config.missing_fields()
        if missing:
            logger.error("Missing configuration: %s", ", ".join(missing))
            return GenerationResult.empty()

        request = build_prompt(
            conventional=self.policy.use_conventional_commits,
            smart_mode=self.smart_mode,
            history=history,
            ticket=self.policy.ticket,
        )
        raw_response = self.query_fn(
            model=self.config.model,
            provider=self.config.provider,
            api_key=self.config.api_key,
            prompt=request.prompt,
            context=self._build_context(diff, branch_name),
            examples=request.examples,
            base_url=self.config.base_url or None,
            timeout=self.config.request_timeout,
        )
        logger.debug("Raw model response: %s", raw_response)
        return parse_response(raw_response, self.policy)
