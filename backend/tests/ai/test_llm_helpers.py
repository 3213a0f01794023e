"""Tests for LLM helper utilities."""
import json
from types import SimpleNamespace

import httpx
import pytest
from anthropic import APIConnectionError, APIError
from tenacity import wait_none

from app.ai.llm_helpers import (
    _invoke_with_retry,
    _parse_json_response,
    _response_text,
    _strip_json_fences,
    find_list,
)
from app.core.exceptions import AIGatewayError

pytestmark = pytest.mark.unit

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class ScriptedMessages:
    """messages.create() double that plays back replies or raises errors in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=outcome)])


class TestStripJsonFences:
    def test_no_fences(self):
        assert _strip_json_fences('{"gaps": []}') == '{"gaps": []}'

    def test_json_fence(self):
        assert _strip_json_fences('```json\n{"gaps": []}\n```') == '{"gaps": []}'

    def test_plain_fence_with_whitespace(self):
        assert _strip_json_fences('  ```\n["Inertia"]\n```  ') == '["Inertia"]'


class TestParseJsonResponse:
    def test_fenced_object(self):
        assert _parse_json_response('```json\n{"concepts": ["Mass"]}\n```') == {"concepts": ["Mass"]}

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            _parse_json_response("Sure! Here are the concepts:")


class TestFindList:
    def test_named_key(self):
        assert find_list({"other": [1], "concepts": ["a"]}, "concepts") == ["a"]

    def test_first_list_value(self):
        assert find_list({"items": ["a", "b"]}, "concepts") == ["a", "b"]

    def test_bare_array(self):
        assert find_list(["a"], "concepts") == ["a"]

    def test_nothing_usable(self):
        assert find_list({"concepts": "a, b"}, "concepts") == []
        assert find_list("text", "concepts") == []


class TestInvokeWithRetry:
    @pytest.mark.asyncio
    async def test_passes_request_through(self):
        client = SimpleNamespace(messages=ScriptedMessages("hello"))

        text = await _invoke_with_retry(
            client, model="claude-test", system="sys", messages=[{"role": "user", "content": "hi"}], max_tokens=64
        )

        assert text == "hello"
        assert client.messages.calls[0]["model"] == "claude-test"
        assert client.messages.calls[0]["max_tokens"] == 64

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        client = SimpleNamespace(messages=ScriptedMessages(APIConnectionError(request=REQUEST), "recovered"))
        invoke = _invoke_with_retry.retry_with(wait=wait_none())

        text = await invoke(client, model="m", system="s", messages=[])

        assert text == "recovered"
        assert len(client.messages.calls) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_three_attempts(self):
        errors = [APIConnectionError(request=REQUEST) for _ in range(3)]
        client = SimpleNamespace(messages=ScriptedMessages(*errors))
        invoke = _invoke_with_retry.retry_with(wait=wait_none())

        with pytest.raises(APIConnectionError):
            await invoke(client, model="m", system="s", messages=[])
        assert len(client.messages.calls) == 3

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        client = SimpleNamespace(messages=ScriptedMessages(APIError("bad request", REQUEST, body=None)))

        with pytest.raises(APIError):
            await _invoke_with_retry(client, model="m", system="s", messages=[])
        assert len(client.messages.calls) == 1


class TestResponseText:
    def test_skips_non_text_blocks(self):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="thinking", thinking="hmm"),
                SimpleNamespace(type="text", text="answer"),
            ]
        )
        assert _response_text(response) == "answer"

    @pytest.mark.parametrize("blocks", [[], [SimpleNamespace(type="tool_use", name="lookup")]])
    def test_no_text_block_raises_gateway_error(self, blocks):
        with pytest.raises(AIGatewayError):
            _response_text(SimpleNamespace(content=blocks))

    @pytest.mark.asyncio
    async def test_empty_content_is_not_retried(self):
        client = SimpleNamespace(messages=ScriptedMessages())

        async def create(**kwargs):
            client.messages.calls.append(kwargs)
            return SimpleNamespace(content=[])

        client.messages.create = create

        with pytest.raises(AIGatewayError):
            await _invoke_with_retry(client, model="m", system="s", messages=[])
        assert len(client.messages.calls) == 1
