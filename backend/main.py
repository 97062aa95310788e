"""FastAPI application — chat endpoint over the AI provider facade.

Architecture layers:
  1. Settings       (settings.py)        — centralized configuration
  2. Providers      (llm/providers/)     — OpenAI / Anthropic adapters + factory
  3. Facade         (llm/client.py)      — generate_text / generate_text_stream
  4. HTTP           (this file)          — /api/chat and /health

The provider is built once in the lifespan (or injected via
``create_app(provider=...)``) and stored on ``app.state.provider``.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from llm.client import generate_text, generate_text_stream, load_default_provider
from llm.providers.base import AIProvider, Message, RequestOptions
from settings import settings

logging.basicConfig(level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ---------------------------------------------------------------------------
#  Application lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Build the default provider unless one was injected.  Failure is fatal."""
    if getattr(app.state, "provider", None) is None:
        app.state.provider = load_default_provider()
    provider: AIProvider = app.state.provider
    logger.info(f"Serving chat with {provider.name} (model={provider.model})")

    yield  # ← application runs here


# ---------------------------------------------------------------------------
#  Request / response models
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[Union[str, List[Union[str, ChatMessage]]]] = None
    stream: bool = False
    system_message: Optional[str] = Field(default=None, alias="systemMessage")
    temperature: float = settings.DEFAULT_TEMPERATURE

    def to_options(self) -> RequestOptions:
        if isinstance(self.prompt, str):
            prompt = self.prompt
        else:
            prompt = [
                m if isinstance(m, str) else Message(role=m.role, content=m.content)
                for m in self.prompt or []
            ]
        return RequestOptions(
            prompt=prompt,
            temperature=self.temperature,
            stream=self.stream,
            system_message=self.system_message,
        )


def get_provider(request: Request) -> AIProvider:
    return request.app.state.provider


def _ndjson(payload: dict) -> str:
    return json.dumps(payload) + "\n"


# ═══════════════════════════════════════════════════════════════════════════
#  CHAT ENDPOINT
# ═══════════════════════════════════════════════════════════════════════════

router = APIRouter()


@router.post("/api/chat")
async def chat(request: ChatRequest, provider: AIProvider = Depends(get_provider)):
    """Buffered JSON ``{response}`` or newline-delimited ``{chunk, done}`` stream."""
    if not request.prompt:
        return JSONResponse({"error": "Prompt is required"}, status_code=400)

    try:
        options = request.to_options()
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    if not request.stream:
        try:
            response = await generate_text(options, provider)
        except Exception as exc:
            logger.error("Chat API error: %s", exc)
            return JSONResponse({"error": str(exc)}, status_code=500)
        return {"response": response}

    async def event_stream():
        try:
            async for event in generate_text_stream(options, provider):
                if event.error:
                    yield _ndjson({"error": event.error, "done": True})
                    break
                yield _ndjson({"chunk": event.text, "done": event.done})
                if event.done:
                    break
        except Exception as exc:
            logger.error("Chat stream error: %s", exc)
            yield _ndjson({"error": str(exc), "done": True})

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache, no-transform", "X-Accel-Buffering": "no"},
    )


# ═══════════════════════════════════════════════════════════════════════════
#  HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/health")
def health_check(provider: AIProvider = Depends(get_provider)):
    """Returns the active provider and model."""
    return {
        "status": "ok",
        "llm_provider": provider.name,
        "model": provider.model,
        "version": VERSION,
    }


# ---------------------------------------------------------------------------
#  App
# ---------------------------------------------------------------------------

def create_app(provider: Optional[AIProvider] = None) -> FastAPI:
    """Build the app.  Pass ``provider`` to skip the environment bootstrap."""
    app = FastAPI(title="AI Chat", version=VERSION, lifespan=lifespan)
    app.state.provider = provider

    _raw_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
    _allowed_origins = _raw_origins if _raw_origins else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
