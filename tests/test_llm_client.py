"""Tests for the LLM client wrapper (no network)."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from family_trip.services.llm_client import LLMClient


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_client(*responses):
    openai = MagicMock()
    openai.chat.completions.create = AsyncMock(side_effect=list(responses))
    return LLMClient(client=openai), openai.chat.completions.create


class TestJsonParsing:
    """Replies are parsed leniently into a dict."""

    @pytest.fixture
    def llm(self):
        return LLMClient(client=MagicMock())

    def test_plain_json(self, llm):
        """Test that a bare JSON object is parsed."""
        assert llm._parse_json_response('{"tripStartDate": "2026-07-09"}') == {"tripStartDate": "2026-07-09"}

    def test_markdown_block(self, llm):
        """Test that JSON inside a code fence is parsed."""
        text = 'Here you go:\n```json\n{"gettingAround": "Ferry"}\n```'
        assert llm._parse_json_response(text) == {"gettingAround": "Ferry"}

    def test_object_inside_prose(self, llm):
        """Test that an object surrounded by prose is found."""
        assert llm._parse_json_response('Result: {"a": 1} hope that helps') == {"a": 1}

    def test_non_object_is_empty(self, llm):
        """Test that arrays and plain text give an empty dict."""
        assert llm._parse_json_response("[1, 2, 3]") == {}
        assert llm._parse_json_response("no json here") == {}


class TestChat:

    @pytest.mark.asyncio
    async def test_chat_json(self):
        """Test that JSON mode is requested and the reply parsed."""
        llm, create = make_client(completion('{"importantNumbers": "112"}'))

        result = await llm.chat_json([{"role": "user", "content": "hi"}])

        assert result == {"importantNumbers": "112"}
        assert create.await_args.kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_retries_without_json_mode(self):
        """Test that a JSON-mode failure is retried without it."""
        llm, create = make_client(RuntimeError("response_format not supported"), completion('{"a": 1}'))

        result = await llm.chat_json([{"role": "user", "content": "hi"}])

        assert result == {"a": 1}
        assert create.await_count == 2
        assert "response_format" not in create.await_args.kwargs

    @pytest.mark.asyncio
    async def test_plain_chat_errors_propagate(self):
        """Test that errors outside JSON mode are raised."""
        llm, _ = make_client(RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await llm.chat([{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_image_without_text(self):
        """Test that a NONE reply means no text, and the image is sent as a data URL."""
        llm, create = make_client(completion("NONE"))

        text = await llm.read_image_text("aGVsbG8=", "image/png")

        assert text == ""
        content = create.await_args.kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"] == "data:image/png;base64,aGVsbG8="
