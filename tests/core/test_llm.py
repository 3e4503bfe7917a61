"""Tests for the LLM gateway and JSON response parsing."""

import asyncio
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from viralscripts.core.llm import (
    LLMGateway,
    LLMResponseError,
    LLMTimeoutError,
    parse_json_array,
    parse_json_response,
    strip_code_fences,
)


def _message(text, output_tokens=5, input_tokens=7, block_type="text"):
    return SimpleNamespace(
        content=[SimpleNamespace(type=block_type, text=text)],
        usage=SimpleNamespace(output_tokens=output_tokens, input_tokens=input_tokens),
    )


class TestJsonParsing:

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n[1, 2]\n```') == "[1, 2]"
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('  [3]  ') == "[3]"

    def test_parse_json_response(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    def test_invalid_json(self):
        with pytest.raises(LLMResponseError, match="Failed to parse LLM response as JSON"):
            parse_json_response("here you go: [1, 2")

    def test_array_required(self):
        assert parse_json_array("[]") == []
        with pytest.raises(LLMResponseError, match="Response is not an array"):
            parse_json_array('{"scripts": []}')


class TestLLMGateway:

    @pytest.mark.asyncio
    async def test_complete(self):
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=_message("hello"))
        gateway = LLMGateway(client=client, timeout=5)

        response = await gateway.complete("prompt", model="claude-test", temperature=0.4, max_tokens=100)

        assert response.text == "hello"
        assert response.output_tokens == 5
        assert response.input_tokens == 7
        assert response.model == "claude-test"
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["temperature"] == 0.4
        assert kwargs["max_tokens"] == 100

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        client = MagicMock()
        client.messages.create = slow
        gateway = LLMGateway(client=client, timeout=0.01)

        with pytest.raises(LLMTimeoutError):
            await gateway.complete("prompt", model="claude-test", temperature=0.5)

    @pytest.mark.asyncio
    async def test_non_text_block(self):
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=_message("", block_type="tool_use"))
        gateway = LLMGateway(client=client)

        with pytest.raises(LLMResponseError):
            await gateway.complete("prompt", model="claude-test", temperature=0.5)

    @pytest.mark.asyncio
    async def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        gateway = LLMGateway(api_key=None)

        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            await gateway.complete("prompt", model="claude-test", temperature=0.5)
