"""OpenAI LLM provider.

Also works with any OpenAI-compatible API (Azure OpenAI, vLLM, Ollama,
Together AI, etc.) — set OPENAI_API_BASE_URL to the custom endpoint.

System instructions are sent as a leading ``system`` message.  All sampling
controls (temperature, max_tokens, top_p, presence/frequency penalties,
stop) are passed through 1:1.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from .base import (
    AIProvider,
    ConfigurationError,
    GenerationError,
    ProviderConfig,
    RequestOptions,
    drop_unset,
    ms_to_seconds,
    normalize_prompt,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000


class OpenAIProvider(AIProvider):
    """OpenAI Chat Completions API."""

    DEFAULT_MODEL = "gpt-4o"
    label = "OpenAI"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        from openai import AsyncOpenAI  # type: ignore[import-untyped]

        kwargs: dict = {
            "api_key": config.api_key,
            "timeout": ms_to_seconds(
                DEFAULT_TIMEOUT_MS if config.timeout is None else config.timeout
            ),
        }
        if config.base_url:
            kwargs["base_url"] = config.base_url
        if config.organization_id:
            kwargs["organization"] = config.organization_id
        try:
            self._client = AsyncOpenAI(**kwargs)
        except Exception as e:
            raise ConfigurationError(f"OpenAI client rejected configuration: {e}") from e
        logger.info(
            f"OpenAI provider ready (model={self.model}"
            f"{', base_url=' + config.base_url if config.base_url else ''})"
        )

    @property
    def name(self) -> str:
        return "openai"

    # ── Internal helpers ──────────────────────────────────────────

    @staticmethod
    def format_messages(options: RequestOptions) -> list[dict]:
        messages: list[dict] = []
        if options.system_message:
            messages.append({"role": "system", "content": options.system_message})
        messages.extend(normalize_prompt(options.prompt))
        return messages

    def _request_kwargs(self, options: RequestOptions, *, stream: bool) -> dict:
        kwargs: dict = dict(
            model=self.model,
            messages=self.format_messages(options),
            stream=stream,
            **drop_unset(
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                top_p=options.top_p,
                frequency_penalty=options.frequency_penalty,
                presence_penalty=options.presence_penalty,
                stop=options.stop_sequences,
            ),
        )
        kwargs.update(options.additional_options)
        return kwargs

    # ── Public API ────────────────────────────────────────────────

    async def generate(self, options: RequestOptions) -> str:
        try:
            kwargs = self._request_kwargs(options, stream=False)
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"OpenAI generation error: {e}")
            raise GenerationError(f"OpenAI generation failed: {e}", provider=self.name) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _stream_deltas(self, options: RequestOptions) -> AsyncIterator[str]:
        kwargs = self._request_kwargs(options, stream=True)
        stream = await self._client.chat.completions.create(**kwargs)
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta
            if delta and delta.content:
                yield delta.content
