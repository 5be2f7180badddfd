"""
sources/reasoning.py — Thin async client for the AI reasoning service.

Wraps openai.AsyncOpenAI chat completions. Every failure (API error,
timeout, empty answer, unparsable JSON) is raised as AIServiceError; the AI
overlay is the only caller and absorbs it per record. No retries: the
overlay's fixed inter-call delay is the only rate control.

Usage:
    client = ReasoningClient.from_settings(settings)   # None when no API key
    answer = await client.chat_json(messages, temperature=0.3, max_tokens=500)
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from openai import APIError, AsyncOpenAI, OpenAIError

from tendermatch_shared.config import Settings

from tendermatch_engine.errors import AIServiceError

log = structlog.get_logger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fence(content: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if the model added one."""
    return _FENCE_RE.sub("", content.strip())


class ReasoningClient:
    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o-mini") -> None:
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReasoningClient | None":
        """Build a client, or return None when AI is not configured."""
        if not settings.ai_enabled:
            log.info("ai_disabled", reason="no openai_api_key")
            return None
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
            timeout=settings.http_timeout_s,
            max_retries=0,
        )
        return cls(client, model=settings.ai_model)

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ) -> str:
        """
        Run one chat completion and return the stripped text content.

        Raises:
            AIServiceError: the call failed or the answer was empty.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIError as exc:
            raise AIServiceError(f"API error: {exc}") from exc
        except OpenAIError as exc:
            raise AIServiceError(f"OpenAI client error: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise AIServiceError("empty completion")
        return content.strip()

    async def chat_json(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ) -> dict[str, Any]:
        """
        chat() and decode the answer as a JSON object.

        Raises:
            AIServiceError: the call failed or the answer is not a JSON object.
        """
        content = await self.chat(messages, temperature=temperature, max_tokens=max_tokens)
        try:
            decoded = json.loads(strip_code_fence(content))
        except json.JSONDecodeError as exc:
            raise AIServiceError(f"non-JSON answer: {content[:80]!r}") from exc
        if not isinstance(decoded, dict):
            raise AIServiceError("answer is not a JSON object")
        return decoded
