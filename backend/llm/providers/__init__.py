"""Provider factory.

Maps a provider type string to its adapter.  Adapter modules (and their
vendor SDKs) are imported lazily, so only the selected provider is loaded.

Usage:
    from llm.providers import create_provider, default_model_for
    p = create_provider("openai", ProviderConfig(api_key=..., model=default_model_for("openai")))
    text = await p.generate(RequestOptions(prompt="Hello"))
"""

from __future__ import annotations

import importlib
import logging

from .base import (
    AIProvider,
    ConfigurationError,
    GenerationError,
    Message,
    ProviderConfig,
    RequestOptions,
    StreamEvent,
    UnsupportedProviderError,
)

logger = logging.getLogger(__name__)

# type -> (module, class, recommended default model)
_REGISTRY: dict[str, tuple[str, str, str]] = {
    "openai": (".openai", "OpenAIProvider", "gpt-4o"),
    "anthropic": (".anthropic", "AnthropicProvider", "claude-3-opus-20240229"),
}

SUPPORTED_PROVIDERS: tuple[str, ...] = tuple(_REGISTRY)


def _lookup(provider_type: str) -> tuple[str, str, str]:
    name = (provider_type or "").strip().lower()
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnsupportedProviderError(provider_type) from None


def create_provider(provider_type: str, config: ProviderConfig) -> AIProvider:
    """Instantiate the adapter registered for ``provider_type``."""
    module_name, class_name, _ = _lookup(provider_type)
    module = importlib.import_module(module_name, package=__name__)
    cls = getattr(module, class_name)
    return cls(config)


def default_model_for(provider_type: str) -> str:
    """Recommended model id for ``provider_type``."""
    return _lookup(provider_type)[2]


__all__ = [
    "AIProvider",
    "ConfigurationError",
    "GenerationError",
    "Message",
    "ProviderConfig",
    "RequestOptions",
    "StreamEvent",
    "SUPPORTED_PROVIDERS",
    "UnsupportedProviderError",
    "create_provider",
    "default_model_for",
]
