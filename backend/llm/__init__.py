"""LLM package — provider-agnostic text generation.

For new code, import from submodules directly::

    from llm.client import generate_text, generate_text_stream
    from llm.providers import create_provider, default_model_for
"""

from .client import (
    create_custom_provider,
    generate_text,
    generate_text_stream,
    load_default_provider,
)
from .providers import (
    AIProvider,
    ConfigurationError,
    GenerationError,
    Message,
    ProviderConfig,
    RequestOptions,
    StreamEvent,
    SUPPORTED_PROVIDERS,
    UnsupportedProviderError,
    create_provider,
    default_model_for,
)

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
    "create_custom_provider",
    "create_provider",
    "default_model_for",
    "generate_text",
    "generate_text_stream",
    "load_default_provider",
]
