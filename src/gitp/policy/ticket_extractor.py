"""
Ticket identifier resolution.

Tickets come from the branch name when it follows a known naming scheme
(``feature/ABC-123``, ``hotfix/ABC-123--urgent``, ``ABC-123-some-work``),
otherwise from the path-specific defaults in the configuration, then from
the global default ticket.
"""

from __future__ import annotations

import re

from gitp.config.loader import Config
from gitp.policy.conventional import path_matches


TICKET_TOKEN = r"[A-Za-z][A-Za-z0-9]*-\d+"

# Tried in order; the first match wins.
BRANCH_TICKET_PATTERNS = (
    re.compile(
        rf"(?i:feature|feat|bugfix|fix|hotfix|release)[/_-]+({TICKET_TOKEN})(?![A-Za-z0-9])"
    ),
    re.compile(rf"^({TICKET_TOKEN})(?![A-Za-z0-9])"),
)


def ticket_from_branch_name(branch_name: str) -> str:
    """Return the ticket encoded in ``branch_name`` or an empty string."""
    for pattern in BRANCH_TICKET_PATTERNS:
        match = pattern.search(branch_name or "")
        if match:
            return match.group(1)
    return ""


def extract_ticket_from_branch(branch_name: str, current_path: str, config: Config) -> str:
    """Resolve the ticket for this invocation.

    Parameters
    ----------
    branch_name : str
        Current Git branch.
    current_path : str
        Working directory the command runs in.
    config : Config
        Loaded configuration.

    Returns
    -------
    str
        The branch ticket, else the first matching ``defaultTicketFor``
        ticket, else ``defaultTicket``, else ``""``.
    """
    ticket = ticket_from_branch_name(branch_name)
    if ticket:
        return ticket
    for entry in config.default_ticket_for:
        if path_matches(entry.path, current_path):
            return entry.ticket
    return config.default_ticket
