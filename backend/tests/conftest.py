"""Pytest conftest — ensure backend/ is importable for flat module imports.

Also provides stub vendor clients so provider tests run offline.
"""

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add backend/ to sys.path so `import settings`, `from llm.client import ...` etc. work
_backend_dir = str(Path(__file__).resolve().parent.parent)
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

from llm.providers.base import AIProvider, ProviderConfig  # noqa: E402


# ─── Stub vendor SDK pieces ───────────────────────────────────────────────

class FakeStream:
    """Async-iterable stand-in for an SDK stream; optionally fails after items."""

    def __init__(self, items, error=None):
        self._items = list(items)
        self._error = error

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item
        if self._error is not None:
            raise self._error


class FakeEndpoint:
    """Records ``create(**kwargs)`` calls and replays a scripted result."""

    def __init__(self, response=None, stream_items=(), error=None, stream_error=None):
        self.response = response
        self.stream_items = list(stream_items)
        self.error = error
        self.stream_error = stream_error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            return FakeStream(self.stream_items, self.stream_error)
        return self.response

    @property
    def last_call(self) -> dict:
        return self.calls[-1]


def openai_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def openai_chunk(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


def anthropic_response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def anthropic_delta(text):
    return SimpleNamespace(
        type="content_block_delta",
        delta=SimpleNamespace(type="text_delta", text=text),
    )


@pytest.fixture
def payloads():
    """Builders for vendor-shaped responses and stream items."""
    return SimpleNamespace(
        openai_response=openai_response,
        openai_chunk=openai_chunk,
        anthropic_response=anthropic_response,
        anthropic_delta=anthropic_delta,
    )


@pytest.fixture
def stub_openai():
    """Return a factory: (endpoint kwargs) -> (OpenAIProvider, FakeEndpoint)."""
    from llm.providers.openai import OpenAIProvider

    def _make(config=None, **endpoint_kwargs):
        provider = OpenAIProvider(config or ProviderConfig(api_key="sk-test", model="gpt-4o"))
        endpoint = FakeEndpoint(**endpoint_kwargs)
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=endpoint))
        return provider, endpoint

    return _make


@pytest.fixture
def stub_anthropic():
    """Return a factory: (endpoint kwargs) -> (AnthropicProvider, FakeEndpoint)."""
    from llm.providers.anthropic import AnthropicProvider

    def _make(config=None, **endpoint_kwargs):
        provider = AnthropicProvider(
            config or ProviderConfig(api_key="sk-ant-test", model="claude-3-opus-20240229")
        )
        endpoint = FakeEndpoint(**endpoint_kwargs)
        provider._client = SimpleNamespace(messages=endpoint)
        return provider, endpoint

    return _make


# ─── Scripted provider for facade / HTTP / CLI tests ──────────────────────

class ScriptedProvider(AIProvider):
    """In-memory provider that replays fixed output."""

    label = "Scripted"

    def __init__(self, text="", chunks=(), error=None, stream_error=None):
        super().__init__(ProviderConfig(api_key="test-key", model="scripted-1"))
        self.text = text
        self.chunks = list(chunks)
        self.error = error
        self.stream_error = stream_error
        self.requests = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def name(self) -> str:
        return "scripted"

    def _enter(self):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

    async def generate(self, options):
        self.requests.append(options)
        self._enter()
        try:
            # yield to the loop so concurrent callers overlap
            await asyncio.sleep(0)
            if self.error is not None:
                raise self.error
            return self.text
        finally:
            self.in_flight -= 1

    async def _stream_deltas(self, options):
        self.requests.append(options)
        self._enter()
        try:
            for chunk in self.chunks:
                await asyncio.sleep(0)
                yield chunk
            if self.stream_error is not None:
                raise self.stream_error
        finally:
            self.in_flight -= 1


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


async def drain(stream) -> list:
    return [event async for event in stream]


@pytest.fixture
def collect():
    """Return an async helper that drains a StreamEvent iterator into a list."""
    return drain
