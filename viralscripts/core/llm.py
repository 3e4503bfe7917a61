"""
LLM Gateway - Anthropic messages API behind a single async call.

Every stage service talks to the model through LLMGateway.complete(), which
applies the per-call timeout and reports token usage. JSON handling for model
output lives here too so stage code only deals with parsed structures.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional

import anthropic

from .config import Config

logger = logging.getLogger(__name__)


class LLMResponseError(ValueError):
    """Raised when model output cannot be parsed into the expected JSON shape."""


class LLMTimeoutError(TimeoutError):
    """Raised when a model call exceeds its timeout."""

    def __init__(self, model: str, timeout: float):
        self.model = model
        self.timeout = timeout
        super().__init__(f"LLM call to {model} timed out after {timeout:.0f}s")


@dataclass
class LLMResponse:
    """Text plus usage counters from one model call."""
    text: str
    output_tokens: int = 0
    input_tokens: int = 0
    model: str = ""


class LLMGateway:
    """
    Thin async wrapper around anthropic.AsyncAnthropic.

    Attributes:
        client: AsyncAnthropic client (None when no API key is configured)
        timeout: Per-call timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            timeout: Per-call timeout in seconds (defaults to Config.LLM_TIMEOUT_SECONDS)
            client: Pre-built client, mainly for tests
        """
        self.timeout = timeout if timeout is not None else Config.LLM_TIMEOUT_SECONDS

        if client is not None:
            self.client = client
            return

        key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not key:
            logger.warning("ANTHROPIC_API_KEY not set - LLM calls will fail")
            self.client = None
        else:
            self.client = anthropic.AsyncAnthropic(api_key=key)

    def _ensure_client(self) -> None:
        """Raise error if Anthropic client not configured."""
        if not self.client:
            raise ValueError(
                "Anthropic client not configured. Set ANTHROPIC_API_KEY environment variable."
            )

    async def complete(
        self,
        prompt: str,
        model: str,
        temperature: float,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """
        Send a single-turn prompt and return the text reply.

        Args:
            prompt: User message content
            model: Anthropic model identifier
            temperature: Sampling temperature
            max_tokens: Output token cap

        Returns:
            LLMResponse with text and token counts

        Raises:
            LLMTimeoutError: If the call exceeds the configured timeout
            LLMResponseError: If the reply has no text block
        """
        self._ensure_client()

        try:
            response = await asyncio.wait_for(
                self.client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMTimeoutError(model, self.timeout) from e

        if not response.content or getattr(response.content[0], "type", "text") != "text":
            raise LLMResponseError("Unexpected response type")

        usage = getattr(response, "usage", None)
        return LLMResponse(
            text=response.content[0].text,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            model=model,
        )


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json / ``` fence if present."""
    content = content.strip()

    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]

    return content.strip()


def parse_json_response(content: str) -> Any:
    """
    Parse JSON from LLM response, handling markdown code fences.

    Args:
        content: Raw response content

    Returns:
        Parsed JSON value

    Raises:
        LLMResponseError: If the content is not valid JSON
    """
    content = strip_code_fences(content)

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}")
        logger.debug(f"Raw content: {content[:1000]}")
        raise LLMResponseError(f"Failed to parse LLM response as JSON: {e}") from e


def parse_json_array(content: str) -> List[Any]:
    """Parse an LLM response that must be a JSON array."""
    parsed = parse_json_response(content)
    if not isinstance(parsed, list):
        raise LLMResponseError("Response is not an array")
    return parsed
