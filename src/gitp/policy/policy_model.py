"""
The per-invocation commit policy value.
"""

from __future__ import annotations

from dataclasses import dataclass

from gitp.config.loader import Config
from gitp.policy.conventional import should_use_conventional_commits
from gitp.policy.ticket_extractor import extract_ticket_from_branch


@dataclass(frozen=True)
class Policy:
    """How the generated message is formatted.

    Attributes
    ----------
    use_conventional_commits : bool
        Whether ``type(scope): summary`` formatting applies.
    ticket : str
        Ticket attached to the message; empty when there is none.
    """

    use_conventional_commits: bool = False
    ticket: str = ""


def resolve_policy(branch_name: str, current_path: str, config: Config) -> Policy:
    """Resolve the ticket and the conventional commit flag once."""
    return Policy(
        use_conventional_commits=should_use_conventional_commits(current_path, config),
        ticket=extract_ticket_from_branch(branch_name, current_path, config),
    )
