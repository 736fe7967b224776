"""
Provider-agnostic access to text-generation backends.

:func:`query` takes the same arguments for every backend and returns the
raw reply text. Each provider class shapes the HTTP request for its API
family (OpenAI-compatible chat completions, Anthropic messages, Ollama
chat) using ``requests``. Failures of any kind raise :class:`LLMError`;
nothing is retried here.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_TIMEOUT = 60.0
MAX_TOKENS = 1024


class LLMError(Exception):
    """Raised when communication with the language model backend fails."""

    pass


def strip_thinking_tags(text: str) -> str:
    """Remove reasoning blocks such as ``<think>...</think>`` from a reply.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>Answer")
    'Answer'
    """
    thinking_patterns = [
        r"<think>.*?</think>",
        r"<thinking>.*?</thinking>",
        r"<thought>.*?</thought>",
        r"<reasoning>.*?</reasoning>",
    ]
    result = text
    for pattern in thinking_patterns:
        result = re.sub(pattern, "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


def render_user_message(context: Sequence[str], examples: Sequence[str]) -> str:
    """Render context entries and example outputs into one user message."""
    parts: List[str] = []
    if context:
        parts.append("# Context")
        parts.extend(entry.strip() for entry in context if entry and entry.strip())
    if examples:
        parts.append("# Examples of the expected output")
        for index, example in enumerate(examples, start=1):
            lines = [line.strip() for line in example.strip().splitlines()]
            parts.append(f"Example {index}:\n" + "\n".join(lines))
    return "\n\n".join(parts)


@dataclass
class BaseProvider:
    """Common request handling for one backend.

    Parameters
    ----------
    model : str
        Model identifier.
    api_key : str
        Credential; may be empty for local backends.
    base_url : str, optional
        Endpoint override. Defaults to :attr:`default_base_url`.
    request_timeout : float, optional
        Timeout in seconds for the HTTP request.
    """

    model: str
    api_key: str = ""
    base_url: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT

    name = "base"
    default_base_url = ""

    def _endpoint(self) -> str:
        raise NotImplementedError

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _payload(self, system: str, user: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    def _root(self) -> str:
        return (self.base_url or self.default_base_url).rstrip("/")

    def generate(self, system: str, user: str) -> str:
        """Send one request and return the reply text.

        Raises
        ------
        LLMError
            On connection errors, non-200 responses or unexpected payloads.
        """
        url = self._endpoint()
        payload = self._payload(system, user)
        logger.debug("Sending request to %s at %s (model %s)", self.name, url, self.model)
        try:
            response = requests.post(
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to %s: %s", self.name, exc)
            raise LLMError(str(exc)) from exc
        if response.status_code != 200:
            logger.error(
                "%s returned non-200 status %s: %s", self.name, response.status_code, response.text
            )
            raise LLMError(f"{self.name} returned status {response.status_code}: {response.text}")
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse %s response: %s", self.name, exc)
            raise LLMError(f"Failed to parse {self.name} response") from exc
        try:
            text = self._extract_text(data)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise LLMError(f"Unexpected response structure from {self.name}") from exc
        if not isinstance(text, str):
            raise LLMError(f"Unexpected response structure from {self.name}")
        return strip_thinking_tags(text)


class OpenAIProvider(BaseProvider):
    """OpenAI and OpenAI-compatible chat completion endpoints."""

    name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def _endpoint(self) -> str:
        return f"{self._root()}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(self, system: str, user: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]


class AnthropicProvider(BaseProvider):
    """Anthropic messages API."""

    name = "anthropic"
    default_base_url = "https://api.anthropic.com/v1"
    api_version = "2023-06-01"

    def _endpoint(self) -> str:
        return f"{self._root()}/messages"

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["x-api-key"] = self.api_key
        headers["anthropic-version"] = self.api_version
        return headers

    def _payload(self, system: str, user: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        return "".join(
            block.get("text", "") for block in data["content"] if block.get("type") == "text"
        )


class OllamaProvider(BaseProvider):
    """Local Ollama server via ``/api/chat``."""

    name = "ollama"
    default_base_url = "http://localhost:11434"

    def _endpoint(self) -> str:
        return f"{self._root()}/api/chat"

    def _payload(self, system: str, user: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

    def _extract_text(self, data: Dict[str, Any]) -> str:
        if "message" in data and isinstance(data["message"], dict):
            return data["message"].get("content", "")
        return data["response"]


PROVIDERS = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "ollama": OllamaProvider,
}


def get_provider(
    provider: str,
    model: str,
    api_key: str = "",
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> BaseProvider:
    """Instantiate the provider registered under ``provider``.

    Raises
    ------
    LLMError
        If the provider name is unknown.
    """
    try:
        provider_cls = PROVIDERS[provider.lower()]
    except KeyError:
        known = ", ".join(sorted(PROVIDERS))
        raise LLMError(f"Unknown provider: {provider}. Use one of: {known}") from None
    return provider_cls(model=model, api_key=api_key, base_url=base_url, request_timeout=timeout)


def query(
    model: str,
    provider: str,
    api_key: str,
    prompt: str,
    context: Sequence[str] = (),
    examples: Sequence[str] = (),
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Ask ``provider`` to complete ``prompt`` and return the raw reply.

    The prompt is sent as the system instruction; ``context`` entries and
    ``examples`` form the user message.

    Raises
    ------
    LLMError
        On unknown providers and on any transport or response failure.
    """
    backend = get_provider(provider, model, api_key, base_url=base_url, timeout=timeout)
    return backend.generate(prompt, render_user_message(context, examples))
