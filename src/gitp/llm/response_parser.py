"""
Parsing of the model reply into a commit message and description.

The reply is expected to carry one ``COMMIT_MESSAGE:`` line and one
``COMMIT_DESCRIPTION:`` line. When a label appears more than once the
first occurrence is kept. The resolved ticket is then attached to the
message according to the active policy.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from gitp.llm.prompt_builder import DESCRIPTION_LABEL, MESSAGE_LABEL
from gitp.models import GenerationResult
from gitp.policy.policy_model import Policy


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# type, optional (scope), optional breaking-change bang, colon
_CONVENTIONAL_HEAD_RE = re.compile(r"^(\w+(?:\([^)]*\))?!?:)\s*(.*)$")


def apply_ticket(message: str, policy: Policy) -> str:
    """Attach ``policy.ticket`` to ``message``.

    With conventional commits the ticket goes right after the
    ``type(scope):`` token (``feat(auth): X-1 add login``); a message
    without that token, or free-form policy, gets ``X-1: message``.
    Messages that already carry the ticket are left unchanged.
    """
    ticket = policy.ticket
    if not ticket or not message:
        return message
    # X-1 must not count as present in front of X-12
    present_re = re.compile(rf"{re.escape(ticket)}(?![A-Za-z0-9])")
    if policy.use_conventional_commits:
        match = _CONVENTIONAL_HEAD_RE.match(message)
        if match:
            head, rest = match.groups()
            if present_re.match(rest):
                return message
            return f"{head} {ticket} {rest}".rstrip()
    if present_re.match(message):
        return message
    return f"{ticket}: {message}"


def parse_response(raw_text: str, policy: Optional[Policy] = None) -> GenerationResult:
    """Extract the labelled lines from ``raw_text``.

    Returns
    -------
    GenerationResult
        The message (ticket applied) and description, or an empty result
        when either labelled line is missing or blank.
    """
    policy = policy or Policy()
    message: Optional[str] = None
    description: Optional[str] = None

    for line in (raw_text or "").splitlines():
        line = line.strip()
        if line.startswith(MESSAGE_LABEL):
            if message is None:
                message = line[len(MESSAGE_LABEL):].strip()
            else:
                logger.debug("Ignoring repeated %s line: %s", MESSAGE_LABEL, line)
        elif line.startswith(DESCRIPTION_LABEL):
            if description is None:
                description = line[len(DESCRIPTION_LABEL):].strip()
            else:
                logger.debug("Ignoring repeated %s line: %s", DESCRIPTION_LABEL, line)

    if not message or not description:
        logger.error(
            "Model reply is missing a %s or %s line", MESSAGE_LABEL, DESCRIPTION_LABEL
        )
        return GenerationResult.empty()
    return GenerationResult(
        commit_message=apply_ticket(message, policy),
        commit_description=description,
    )
