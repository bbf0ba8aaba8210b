"""Claude API client wrapper with retry logic and JSON extraction."""

from __future__ import annotations

import json
import logging
import os
import re
import time
from typing import Any

from email_agent.core.config import DEFAULT_MODEL
from email_agent.exceptions import LLMError, LLMResponseError

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class LLMClient:
    """Synchronous wrapper around the Anthropic SDK.

    Rate-limit and timeout errors are retried with exponential backoff at
    this transport layer only; every other API error surfaces as
    :class:`LLMError` on the first attempt.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
    ):
        if not api_key and not os.environ.get("ANTHROPIC_API_KEY"):
            raise LLMError(
                "Anthropic API key is required. "
                "Pass it directly or set ANTHROPIC_API_KEY in your environment."
            )
        from anthropic import Anthropic

        self._client = Anthropic(api_key=api_key or None)
        self.model = model
        self.max_retries = max_retries

    @property
    def client(self):
        """Access the underlying Anthropic SDK client for advanced usage."""
        return self._client

    def generate(
        self,
        user_content: str,
        system_prompt: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        model: str | None = None,
    ) -> dict:
        """Send a single-turn message to Claude.

        Returns:
            dict with keys: text, input_tokens, output_tokens, model
        """
        from anthropic import APIError, APITimeoutError, RateLimitError

        use_model = model or self.model
        kwargs: dict[str, Any] = {
            "model": use_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_content}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        logger.debug(
            f"Sending request to Claude (model={use_model}, "
            f"max_tokens={max_tokens}, prompt_length={len(user_content)})"
        )
        for attempt in range(self.max_retries):
            try:
                response = self._client.messages.create(**kwargs)
            except RateLimitError:
                wait = 2 ** (attempt + 1)
                logger.warning(f"Rate limited, retrying in {wait}s (attempt {attempt + 1})")
                time.sleep(wait)
                continue
            except APITimeoutError:
                wait = 2 ** attempt
                logger.warning(f"API timeout, retrying in {wait}s (attempt {attempt + 1})")
                time.sleep(wait)
                continue
            except APIError as e:
                raise LLMError(f"Claude API error: {e}") from e

            text = next(
                (block.text for block in response.content if block.type == "text"),
                None,
            )
            if text is None:
                raise LLMResponseError("No text content in Claude response")

            logger.debug(
                f"Received response from Claude (input_tokens={response.usage.input_tokens}, "
                f"output_tokens={response.usage.output_tokens})"
            )
            return {
                "text": text,
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "model": use_model,
            }

        raise LLMError(f"Failed after {self.max_retries} retries")

    def parse_json(self, prompt: str, max_tokens: int = 4096) -> Any:
        """Ask Claude for JSON and decode it.

        Accepts a bare JSON document or one wrapped in a markdown code fence.

        Raises:
            LLMError: the API call failed.
            LLMResponseError: the reply was not valid JSON.
        """
        response = self.generate(prompt, max_tokens=max_tokens, temperature=0.3)
        return extract_json(response["text"])


def extract_json(text: str) -> Any:
    """Decode the JSON document in a model reply."""
    match = _FENCED_JSON.search(text)
    candidate = (match.group(1) if match else text).strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON from Claude response: {candidate[:500]}")
        raise LLMResponseError("Failed to parse JSON from Claude response") from e
