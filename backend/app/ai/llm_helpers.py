"""Shared LLM utility functions for retry, fence-stripping, and JSON parsing.

This module provides:
- _strip_json_fences: Remove markdown code fences from LLM output
- _parse_json_response: Parse JSON from LLM response after stripping fences
- _invoke_with_retry: Retry messages.create() on transient Anthropic failures
- _response_text: Text of the first text block in a messages.create() response
- find_list: Pull the list payload out of a parsed JSON object
"""

import json
from typing import Any

import structlog
from anthropic import APIConnectionError, APITimeoutError, RateLimitError
from anthropic._exceptions import OverloadedError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.exceptions import AIGatewayError

logger = structlog.get_logger(__name__)

TRANSIENT_ERRORS = (OverloadedError, RateLimitError, APITimeoutError, APIConnectionError)


def _strip_json_fences(content: str) -> str:
    """Remove markdown code fences wrapping JSON output."""
    content = content.strip()
    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3].rstrip()
    return content


def _parse_json_response(content: str) -> dict | list:
    """Parse JSON from LLM response, stripping fences first."""
    return json.loads(_strip_json_fences(content))


def find_list(payload: dict | list, key: str) -> list:
    """Return ``payload[key]`` if it is a list, else the first list value.

    A bare JSON array is returned as-is; anything else yields [].
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get(key), list):
        return payload[key]
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []


def _response_text(response: Any) -> str:
    """Text of the first ``type == "text"`` block; tool_use or thinking blocks are skipped."""
    blocks = getattr(response, "content", None) or []
    for block in blocks:
        if getattr(block, "type", None) == "text":
            return block.text
    logger.warning("ai_response_without_text", block_types=[getattr(b, "type", None) for b in blocks])
    raise AIGatewayError("AI provider returned no text content")


@retry(
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
    before_sleep=lambda rs: logger.warning(
        "ai_transient_error_retrying",
        attempt=rs.attempt_number,
        sleep_seconds=rs.next_action.sleep,
    ),
)
async def _invoke_with_retry(
    client: Any,
    model: str,
    system: str,
    messages: list[dict],
    max_tokens: int = 2048,
) -> str:
    """Invoke Anthropic messages.create() with retry on transient failures.

    Retries up to 2 times with exponential backoff on overload (529), rate
    limit, timeout and connection errors. All other exceptions propagate
    immediately.

    Args:
        client: anthropic.AsyncAnthropic (or any object with .messages.create())
        model: Model identifier
        system: System prompt string
        messages: List of message dicts (role/content format)
        max_tokens: Maximum tokens for the response

    Returns:
        Text content of the first text block

    Raises:
        AIGatewayError: If the response carries no text block
    """
    response = await client.messages.create(
        model=model,
        system=system,
        messages=messages,
        max_tokens=max_tokens,
    )
    return _response_text(response)
