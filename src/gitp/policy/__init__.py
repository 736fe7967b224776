"""
Commit formatting policy.

Decides once per invocation whether conventional commits apply to the
current directory and which ticket identifier, if any, is attached to
the generated message.
"""

from .conventional import path_matches, should_use_conventional_commits  # noqa: F401
from .policy_model import Policy, resolve_policy  # noqa: F401
from .ticket_extractor import extract_ticket_from_branch  # noqa: F401
