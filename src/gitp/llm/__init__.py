"""
Language model integration for gitp.

This package contains the provider-agnostic :func:`query` function, the
prompt builder, the reply parser and the :class:`CommitMessageGenerator`
that ties them together.
"""

from .commit_message_generator import CommitMessageGenerator  # noqa: F401
from .prompt_builder import PromptRequest, build_prompt  # noqa: F401
from .providers import LLMError, query  # noqa: F401
from .response_parser import apply_ticket, parse_response  # noqa: F401
