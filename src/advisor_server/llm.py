"""Completion collaborator: prompt text in, response text out."""

from __future__ import annotations

import asyncio

from openai import OpenAI

from .settings import AdvisorSettings


class CompletionUnavailable(RuntimeError):
    """No completion backend is configured (missing key or mock mode)."""


class CompletionClient:
    def __init__(self, settings: AdvisorSettings) -> None:
        self._settings = settings
        self._client = None
        if settings.llm_api_key and not settings.mock_llm:
            self._client = OpenAI(
                api_key=settings.llm_api_key,
                base_url=settings.llm_base_url,
                timeout=settings.llm_timeout_s,
            )

    async def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        json_mode: bool = False,
        max_tokens: int | None = None,
    ) -> str:
        if self._client is None:
            raise CompletionUnavailable("Completion backend is not configured")

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        kwargs = {
            "model": self._settings.llm_model,
            "messages": messages,
            "temperature": self._settings.temperature,
            "max_tokens": max_tokens or self._settings.suggestion_max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        # The SDK client is synchronous; keep the event loop free while it waits.
        response = await asyncio.to_thread(self._client.chat.completions.create, **kwargs)
        if not response.choices:
            raise ValueError("Completion returned no choices")
        return (response.choices[0].message.content or "").strip()
