import json
import unittest
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import requests

from gitp.llm.providers import (
    AnthropicProvider,
    LLMError,
    OllamaProvider,
    OpenAIProvider,
    get_provider,
    query,
    render_user_message,
    strip_thinking_tags,
)


class DummyResponse(SimpleNamespace):
    def json(self):
        return json.loads(self.text)


class RecordingPost:
    """Stand-in for ``requests.post`` that records its last call."""

    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)
        self.calls = []

    def __call__(self, url, *_args, **kwargs):
        self.calls.append((url, kwargs))
        return DummyResponse(status_code=self.status_code, text=self.text)


class TestOpenAIProvider(unittest.TestCase):
    def test_request_shape_and_reply(self) -> None:
        fake_post = RecordingPost(body={"choices": [{"message": {"content": "Hello"}}]})
        with patch("requests.post", fake_post):
            provider = OpenAIProvider(model="gpt-4o-mini", api_key="sk-1")
            self.assertEqual(provider.generate("system text", "user text"), "Hello")

        url, kwargs = fake_post.calls[0]
        self.assertEqual(url, "https://api.openai.com/v1/chat/completions")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-1")
        self.assertEqual(kwargs["json"]["model"], "gpt-4o-mini")
        self.assertEqual(
            kwargs["json"]["messages"],
            [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
        )
        self.assertEqual(kwargs["timeout"], 60.0)

    def test_base_url_override(self) -> None:
        fake_post = RecordingPost(body={"choices": [{"message": {"content": "ok"}}]})
        with patch("requests.post", fake_post):
            OpenAIProvider(model="m", base_url="http://proxy.local/v1/").generate("s", "u")
        self.assertEqual(fake_post.calls[0][0], "http://proxy.local/v1/chat/completions")

    def test_missing_choices(self) -> None:
        with patch("requests.post", RecordingPost(body={"choices": []})):
            with self.assertRaises(LLMError):
                OpenAIProvider(model="m").generate("s", "u")


class TestAnthropicProvider(unittest.TestCase):
    def test_request_shape_and_reply(self) -> None:
        body = {
            "content": [
                {"type": "text", "text": "COMMIT_MESSAGE: Add"},
                {"type": "tool_use", "id": "x"},
                {"type": "text", "text": "\nCOMMIT_DESCRIPTION: Adds"},
            ]
        }
        fake_post = RecordingPost(body=body)
        with patch("requests.post", fake_post):
            reply = AnthropicProvider(model="claude", api_key="key").generate("sys", "usr")

        self.assertEqual(reply, "COMMIT_MESSAGE: Add\nCOMMIT_DESCRIPTION: Adds")
        url, kwargs = fake_post.calls[0]
        self.assertEqual(url, "https://api.anthropic.com/v1/messages")
        self.assertEqual(kwargs["headers"]["x-api-key"], "key")
        self.assertEqual(kwargs["headers"]["anthropic-version"], "2023-06-01")
        self.assertEqual(kwargs["json"]["system"], "sys")
        self.assertEqual(kwargs["json"]["messages"], [{"role": "user", "content": "usr"}])
        self.assertIn("max_tokens", kwargs["json"])


class TestOllamaProvider(unittest.TestCase):
    def test_chat_reply(self) -> None:
        fake_post = RecordingPost(body={"message": {"role": "assistant", "content": "Hello"}})
        with patch("requests.post", fake_post):
            self.assertEqual(OllamaProvider(model="llama3").generate("s", "u"), "Hello")
        url, kwargs = fake_post.calls[0]
        self.assertEqual(url, "http://localhost:11434/api/chat")
        self.assertFalse(kwargs["json"]["stream"])
        self.assertNotIn("Authorization", kwargs["headers"])

    def test_generate_style_reply(self) -> None:
        with patch("requests.post", RecordingPost(body={"response": "Hello"})):
            self.assertEqual(OllamaProvider(model="llama3").generate("s", "u"), "Hello")

    def test_generate_error_status(self) -> None:
        with patch("requests.post", RecordingPost(status_code=500, text="Internal error")):
            with self.assertRaises(LLMError) as ctx:
                OllamaProvider(model="llama3").generate("s", "u")
        self.assertIn("500", str(ctx.exception))

    def test_generate_invalid_json(self) -> None:
        with patch("requests.post", RecordingPost(text="not json")):
            with self.assertRaises(LLMError):
                OllamaProvider(model="llama3").generate("s", "u")

    def test_non_string_content(self) -> None:
        with patch("requests.post", RecordingPost(body={"message": {"content": 42}})):
            with self.assertRaises(LLMError):
                OllamaProvider(model="llama3").generate("s", "u")


def test_connection_error_becomes_llm_error():
    def failing_post(*_args, **_kwargs):
        raise requests.ConnectionError("refused")

    with patch("requests.post", failing_post):
        with pytest.raises(LLMError, match="refused"):
            OpenAIProvider(model="m").generate("s", "u")


def test_thinking_tags_are_stripped_from_replies():
    body = {"message": {"content": "<think>hmm\nlet me see</think>\nCOMMIT_MESSAGE: Add"}}
    with patch("requests.post", RecordingPost(body=body)):
        assert OllamaProvider(model="qwen").generate("s", "u") == "COMMIT_MESSAGE: Add"


def test_strip_thinking_tags_variants():
    assert strip_thinking_tags("<THINKING>x</THINKING> a") == "a"
    assert strip_thinking_tags("<reasoning>\n1\n2\n</reasoning>b <thought>c</thought>") == "b"
    assert strip_thinking_tags("  plain  ") == "plain"


def test_get_provider_is_case_insensitive_and_rejects_unknown():
    assert isinstance(get_provider("OpenAI", "m"), OpenAIProvider)
    with pytest.raises(LLMError, match="Unknown provider"):
        get_provider("mistral", "m")


def test_render_user_message():
    rendered = render_user_message(
        ["diff --git a/x b/x", "", "Current branch: main"],
        ["  COMMIT_MESSAGE: A\n  COMMIT_DESCRIPTION: B"],
    )
    assert rendered == (
        "# Context\n\n"
        "diff --git a/x b/x\n\n"
        "Current branch: main\n\n"
        "# Examples of the expected output\n\n"
        "Example 1:\nCOMMIT_MESSAGE: A\nCOMMIT_DESCRIPTION: B"
    )


def test_query_sends_prompt_as_system_instruction():
    fake_post = RecordingPost(body={"choices": [{"message": {"content": "reply"}}]})
    with patch("requests.post", fake_post):
        reply = query(
            model="gpt",
            provider="openai",
            api_key="k",
            prompt="instructions",
            context=["ctx"],
            examples=["ex"],
            timeout=5,
        )
    assert reply == "reply"
    _url, kwargs = fake_post.calls[0]
    assert kwargs["json"]["messages"][0] == {"role": "system", "content": "instructions"}
    assert "ctx" in kwargs["json"]["messages"][1]["content"]
    assert kwargs["timeout"] == 5
