"""LLM client — the facade callers use for buffered and streamed generation.

The default provider is not created at import time.  Entry points build it
once at startup with :func:`load_default_provider` and hand it to whatever
needs it (see ``main.create_app``).

Usage:
    from llm.client import load_default_provider, generate_text, generate_text_stream

    provider = load_default_provider()
    text = await generate_text(RequestOptions(prompt="Hi"), provider)
    async for event in generate_text_stream(RequestOptions(prompt="Hi"), provider):
        ...
"""

from __future__ import annotations

import dataclasses
import logging
from typing import AsyncIterator, Optional

from .providers import create_provider, default_model_for
from .providers.base import (
    AIProvider,
    ConfigurationError,
    ProviderConfig,
    RequestOptions,
    StreamEvent,
)

logger = logging.getLogger(__name__)


def default_provider_options(
    settings=None,
    provider_type: Optional[str] = None,
    warn: bool = True,
) -> tuple[str, ProviderConfig]:
    """Resolve a provider type and config from settings.

    ``provider_type`` defaults to AI_PROVIDER.  AI_MODEL only applies to the
    configured AI_PROVIDER; other types get their recommended default model.

    A missing API key is only a warning here (silenced with ``warn=False``);
    provider construction is what decides whether it is fatal.
    """
    if settings is None:
        from settings import settings

    configured = (settings.AI_PROVIDER or "openai").strip().lower()
    provider_type = (provider_type or configured).strip().lower()
    api_key = settings.api_key_for(provider_type)
    if not api_key and warn:
        logger.warning(
            f"No API key found for {provider_type} provider.  "
            f"Set {provider_type.upper()}_API_KEY."
        )

    config = ProviderConfig(
        api_key=api_key,
        model=(settings.AI_MODEL if provider_type == configured else "")
        or default_model_for(provider_type),
        base_url=settings.base_url_for(provider_type) or None,
        organization_id=settings.OPENAI_ORGANIZATION_ID or None,
        timeout=settings.AI_TIMEOUT_MS or None,
    )
    return provider_type, config


def load_default_provider(settings=None) -> AIProvider:
    """Build the default provider.  Raises ConfigurationError on any failure."""
    try:
        provider_type, config = default_provider_options(settings)
        return create_provider(provider_type, config)
    except Exception as e:
        logger.error(f"Failed to initialize default AI provider: {e}")
        raise ConfigurationError("AI provider initialization failed") from e


def create_custom_provider(
    provider_type: str,
    base: Optional[ProviderConfig] = None,
    **overrides,
) -> AIProvider:
    """Create a provider from explicit config, layered over ``base``.

    With no ``base``, the config for ``provider_type`` is resolved from
    settings; explicit ``overrides`` (api_key, model, base_url, ...) always
    win.  Raises ConfigurationError; callers may fix the config and retry.
    """
    if base is None:
        # unknown types fail before any key lookup or warning
        default_model_for(provider_type)
        _, base = default_provider_options(
            provider_type=provider_type,
            warn="api_key" not in overrides,
        )
    return create_provider(provider_type, dataclasses.replace(base, **overrides))


async def generate_text(options: RequestOptions, provider: AIProvider) -> str:
    """Generate a complete (non-streaming) response."""
    return await provider.generate(options)


def generate_text_stream(
    options: RequestOptions,
    provider: AIProvider,
) -> AsyncIterator[StreamEvent]:
    """Generate a streaming response.  Always ends with a done event."""
    return provider.generate_stream(dataclasses.replace(options, stream=True))
