"""
Prompt construction for commit message generation.

The prompt varies on three inputs: whether conventional commits apply,
whether smart context is attached, and the history of rejected attempts.
The ticket is attached to the message after generation, so the model is
told where it will go but asked not to write it.
"""

from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import Sequence, Tuple

from gitp.models import Attempt


MESSAGE_LABEL = "COMMIT_MESSAGE:"
DESCRIPTION_LABEL = "COMMIT_DESCRIPTION:"

SHARED_RULES = (
    "The commit description should provide meaningful technical context about WHY the "
    "changes were made, not just WHAT was changed",
    'AVOID stating obvious file changes like "updated package.json" or "modified index.js"',
    "Focus on the business logic, architectural decisions, or problem being solved",
    "Think about what a developer reading this commit in 6 months would need to know",
)

CONVENTIONAL_RULES = (
    "MUST use the conventional commit format: type(optional scope): summary",
    "Choose the type that best describes the change from: feat, fix, docs, style, "
    "refactor, perf, test, build, ci, chore, revert",
    "The commit message should be very short and straight to the point",
)

FREE_FORM_RULES = (
    'DO NOT use conventional commit prefixes like "feat:", "fix:", "chore:", "docs:", '
    '"style:", "refactor:", "test:", "build:", etc.',
    'Start the commit message directly with the action verb (e.g., "Add", "Update", '
    '"Fix", "Implement", "Refactor")',
    "Write as a SENIOR DEVELOPER would - professional, concise, and technically accurate",
    "The commit message should be very short and straight to the point (max 50 characters)",
)

SMART_RULE = (
    "Use the smart context provided to understand component relationships and architecture"
)

CONVENTIONAL_EXAMPLES = (
    f"{MESSAGE_LABEL} feat(api): implement async request batching for API calls\n"
    f"{DESCRIPTION_LABEL} Reduces server load by combining multiple API requests into "
    "batched operations. This architectural change improves performance by 40% during peak "
    "usage and prevents rate limiting issues encountered in production.",
    f"{MESSAGE_LABEL} fix: resolve memory leak in event listener cleanup\n"
    f"{DESCRIPTION_LABEL} Event listeners were not being properly removed on component "
    "unmount, causing memory consumption to grow over time. Implemented proper cleanup in "
    "lifecycle methods to ensure all listeners are detached when components are destroyed.",
)

FREE_FORM_EXAMPLES = (
    f"{MESSAGE_LABEL} Implement async request batching for API calls\n"
    f"{DESCRIPTION_LABEL} Reduces server load by combining multiple API requests into "
    "batched operations. This architectural change improves performance by 40% during peak "
    "usage and prevents rate limiting issues encountered in production.",
    f"{MESSAGE_LABEL} Fix memory leak in event listener cleanup\n"
    f"{DESCRIPTION_LABEL} Event listeners were not being properly removed on component "
    "unmount, causing memory consumption to grow over time. Implemented proper cleanup in "
    "lifecycle methods to ensure all listeners are detached when components are destroyed.",
)


@dataclass(frozen=True)
class PromptRequest:
    """The instruction text and worked examples for one generation."""

    prompt: str
    examples: Tuple[str, ...]


def _ticket_guidance(conventional: bool, ticket: str) -> str:
    if not ticket:
        return "No ticket applies to this change. Do not invent one."
    if conventional:
        placement = f"feat(scope): {ticket} add user authentication"
    else:
        placement = f"{ticket}: Add user authentication"
    return (
        f"This change belongs to ticket {ticket}. Do NOT write the ticket yourself; it is "
        f"added automatically, for example: {placement}"
    )


def format_history(history: Sequence[Attempt]) -> str:
    """Render rejected attempts, oldest first."""
    if not history:
        return ""
    parts = ["# Previous attempts and feedback:"]
    for index, attempt in enumerate(history, start=1):
        parts.append(
            f"Attempt {index}:\n"
            f"Message: {attempt.message}\n"
            f"Description: {attempt.description}\n"
            f"User feedback: {attempt.feedback}"
        )
    parts.append(
        "Take the feedback into account and do not repeat the rejected phrasing."
    )
    return "\n\n".join(parts)


def build_prompt(
    conventional: bool,
    smart_mode: bool,
    history: Sequence[Attempt] = (),
    ticket: str = "",
) -> PromptRequest:
    """Compose the generation request.

    Parameters
    ----------
    conventional : bool
        Use the conventional commit rule set and examples.
    smart_mode : bool
        Smart context is part of the request context.
    history : Sequence[Attempt]
        Rejected attempts with the user's feedback, in order.
    ticket : str
        Ticket that will be attached to the message, if any.
    """
    rules = (CONVENTIONAL_RULES if conventional else FREE_FORM_RULES) + SHARED_RULES
    if smart_mode:
        rules += (SMART_RULE,)
    context_note = (
        " and additional smart context about the affected components and their relationships"
        if smart_mode
        else ""
    )

    sections = [
        dedent(
            f"""
            # Task
            Generate a commit message and a commit description for code changes

            # How to
            Use the provided context to generate the commit message and description. In the context section you will find the diff of the changes{context_note}.
            """
        ).strip(),
        "# CRITICAL Requirements\n" + "\n".join(f"- {rule}" for rule in rules),
        "# Ticket\n" + _ticket_guidance(conventional, ticket),
        dedent(
            f"""
            # Format
            The output format should consist of two lines, prefixed with "{MESSAGE_LABEL[:-1]}" for the commit message and "{DESCRIPTION_LABEL[:-1]}" for the commit description, like this:
            {MESSAGE_LABEL} <commit message here>
            {DESCRIPTION_LABEL} <commit description here>
            """
        ).strip(),
    ]
    history_text = format_history(history)
    if history_text:
        sections.append(history_text)

    examples = CONVENTIONAL_EXAMPLES if conventional else FREE_FORM_EXAMPLES
    return PromptRequest(prompt="\n\n".join(sections), examples=examples)
