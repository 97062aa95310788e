"""Anthropic LLM provider.

Handles Anthropic-specific API differences:
  - System prompt is a separate parameter (not a message)
  - max_tokens is mandatory (defaults to 1024 here)
  - presence_penalty / frequency_penalty are not supported and are dropped
  - Response content is a list of typed blocks
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Optional

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

DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(AIProvider):
    """Anthropic Messages API."""

    DEFAULT_MODEL = "claude-3-opus-20240229"
    label = "Anthropic"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        from anthropic import AsyncAnthropic  # type: ignore[import-untyped]

        kwargs: dict = {"api_key": config.api_key}
        if config.base_url:
            kwargs["base_url"] = config.base_url
        if config.timeout is not None:
            kwargs["timeout"] = ms_to_seconds(config.timeout)
        try:
            self._client = AsyncAnthropic(**kwargs)
        except Exception as e:
            raise ConfigurationError(f"Anthropic client rejected configuration: {e}") from e
        logger.info(f"Anthropic provider ready (model={self.model})")

    @property
    def name(self) -> str:
        return "anthropic"

    # ── Internal helpers ──────────────────────────────────────────

    @staticmethod
    def format_input(options: RequestOptions) -> tuple[Optional[str], list[dict]]:
        """Split options into (system, messages).

        Anthropic takes system as a top-level param, so any system-role
        entries in the conversation are lifted out after ``system_message``.
        """
        system_parts: list[str] = []
        if options.system_message:
            system_parts.append(options.system_message)

        chat: list[dict] = []
        for msg in normalize_prompt(options.prompt):
            if msg["role"] == "system":
                system_parts.append(msg["content"])
            else:
                chat.append(msg)

        system = "\n\n".join(system_parts) if system_parts else None
        return system, chat

    def _request_kwargs(self, options: RequestOptions, *, stream: bool) -> dict:
        if options.presence_penalty is not None or options.frequency_penalty is not None:
            logger.debug("Anthropic: dropping unsupported presence/frequency penalty")

        system, messages = self.format_input(options)
        kwargs: dict = dict(
            model=self.model,
            messages=messages,
            max_tokens=(
                DEFAULT_MAX_TOKENS if options.max_tokens is None else options.max_tokens
            ),
            stream=stream,
            **drop_unset(
                system=system,
                temperature=options.temperature,
                top_p=options.top_p,
                stop_sequences=options.stop_sequences,
            ),
        )
        kwargs.update(options.additional_options)
        return kwargs

    # ── Public API ────────────────────────────────────────────────

    async def generate(self, options: RequestOptions) -> str:
        try:
            kwargs = self._request_kwargs(options, stream=False)
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"Anthropic generation error: {e}")
            raise GenerationError(f"Anthropic generation failed: {e}", provider=self.name) from e

        return "".join(
            block.text
            for block in (response.content or [])
            if getattr(block, "type", None) == "text"
        )

    async def _stream_deltas(self, options: RequestOptions) -> AsyncIterator[str]:
        kwargs = self._request_kwargs(options, stream=True)
        stream = await self._client.messages.create(**kwargs)
        async for event in stream:
            if event.type != "content_block_delta":
                continue
            text = getattr(event.delta, "text", None)
            if text:
                yield text
