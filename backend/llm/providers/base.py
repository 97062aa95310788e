"""LLM provider base class and shared request/response types.

Every provider implements two methods:
  - generate(options) -> str               (returns response text)
  - generate_stream(options)               (async-yields StreamEvent objects)

To add a new provider:
  1. Create llm/providers/your_provider.py
  2. Subclass AIProvider and implement generate / _stream_deltas
  3. Register it in llm/providers/__init__.py
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

VALID_ROLES = ("user", "assistant", "system")


# ── Errors ────────────────────────────────────────────────────────────────

class ConfigurationError(Exception):
    """Provider could not be constructed (missing key, bad type, SDK refusal)."""


class UnsupportedProviderError(ConfigurationError):
    """Provider type is not one of the registered types."""

    def __init__(self, provider_type: str):
        self.provider_type = provider_type
        super().__init__(f"Unsupported AI provider type: {provider_type}")


class GenerationError(Exception):
    """A buffered vendor call failed."""

    def __init__(self, message: str, provider: str = ""):
        self.provider = provider
        super().__init__(message)


# ── Types ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProviderConfig:
    """Per-instance provider configuration.  Immutable after creation.

    ``timeout`` is in milliseconds; adapters convert it for their SDK.
    """

    api_key: str
    model: str
    base_url: Optional[str] = None
    organization_id: Optional[str] = None
    timeout: Optional[int] = None


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in VALID_ROLES:
            raise ValueError(
                f"Invalid message role: '{self.role}'.  "
                f"Expected one of: {', '.join(VALID_ROLES)}"
            )

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


PromptEntry = Union[Message, Mapping[str, Any], str]
Prompt = Union[str, Sequence[PromptEntry]]


@dataclass
class RequestOptions:
    """Options for a single generation call.

    ``None`` means "not sent"; each provider applies its own defaults.
    """

    prompt: Prompt
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False
    stop_sequences: Optional[list[str]] = None
    system_message: Optional[str] = None
    top_p: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    additional_options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StreamEvent:
    """One step of a streamed generation.

    ``error`` is only ever set on the terminal (``done=True``) event.
    """

    text: str
    done: bool
    error: Optional[str] = None


# ── Message formatting ────────────────────────────────────────────────────

def normalize_prompt(prompt: Prompt) -> list[dict]:
    """Turn a prompt into an ordered list of ``{"role", "content"}`` dicts.

    A plain string becomes a single user message.  Inside a sequence, raw
    strings become user messages; structured entries pass through as-is.
    """
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]

    messages: list[dict] = []
    for entry in prompt:
        if isinstance(entry, str):
            messages.append({"role": "user", "content": entry})
        elif isinstance(entry, Message):
            messages.append(entry.to_dict())
        elif isinstance(entry, Mapping):
            if "role" not in entry or "content" not in entry:
                raise ValueError(
                    f"Prompt message needs 'role' and 'content': {dict(entry)!r}"
                )
            messages.append({"role": entry["role"], "content": entry["content"]})
        else:
            raise TypeError(f"Unsupported prompt entry: {type(entry).__name__}")
    return messages


def drop_unset(**params: Any) -> dict:
    """Keep only parameters the caller actually set."""
    return {k: v for k, v in params.items() if v is not None}


def ms_to_seconds(timeout_ms: Optional[int]) -> Optional[float]:
    return None if timeout_ms is None else timeout_ms / 1000.0


# ── Provider interface ────────────────────────────────────────────────────

class AIProvider(ABC):
    """Abstract base for AI providers.

    Instances hold only their configuration and an SDK client handle, so a
    single instance can serve many concurrent requests.
    """

    #: Human-readable vendor label used in error messages.
    label: str = ""

    def __init__(self, config: ProviderConfig):
        if not config.api_key:
            raise ConfigurationError(
                f"{self.label or self.name} provider requires an API key"
            )
        self._config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier (e.g. 'openai', 'anthropic')."""
        ...

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @abstractmethod
    async def generate(self, options: RequestOptions) -> str:
        """Send one buffered request and return the full response text.

        Returns ``""`` when the vendor produced no content; raises
        :class:`GenerationError` when the call itself fails.
        """
        ...

    @abstractmethod
    def _stream_deltas(self, options: RequestOptions) -> AsyncIterator[str]:
        """Yield raw text deltas from the vendor stream (may raise)."""
        ...

    async def generate_stream(self, options: RequestOptions) -> AsyncIterator[StreamEvent]:
        """Yield StreamEvents, always terminated by exactly one done event.

        Vendor failures do not escape iteration: they become the terminal
        event's ``error`` field.
        """
        async for event in self._guard_stream(self._stream_deltas(options)):
            yield event

    async def _guard_stream(self, deltas: AsyncIterator[str]) -> AsyncIterator[StreamEvent]:
        try:
            async for text in deltas:
                if text:
                    yield StreamEvent(text=text, done=False)
        except Exception as e:
            logger.error(f"{self.label} streaming error: {e}")
            detail = str(e) or type(e).__name__
            yield StreamEvent(
                text="",
                done=True,
                error=f"{self.label} stream generation failed: {detail}",
            )
            return
        yield StreamEvent(text="", done=True)
