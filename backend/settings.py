"""Centralized configuration — every tunable in one place.

Environment variables override defaults. Import anywhere:

    from settings import settings

All values are frozen at startup. To change, update .env and restart.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level above backend/)
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")


# ── Helpers ───────────────────────────────────────────────────────────────

def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int = 0) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float = 0.0) -> float:
    return float(os.getenv(key, str(default)))


def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


# ── Settings ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    """Application settings.  Immutable after creation."""

    # ── AI Provider ───────────────────────────────────────────────
    # Supported: openai, anthropic
    AI_PROVIDER: str = _env("AI_PROVIDER", "openai")
    # Empty AI_MODEL → the provider's recommended default model.
    AI_MODEL: str = _env("AI_MODEL")
    # Client timeout in milliseconds.  0 → provider default.
    AI_TIMEOUT_MS: int = _env_int("AI_TIMEOUT_MS", 0)

    # ── Vendor credentials ────────────────────────────────────────
    # Looked up as <PROVIDER>_API_KEY / <PROVIDER>_API_BASE_URL.
    OPENAI_API_KEY: str = _env("OPENAI_API_KEY")
    OPENAI_API_BASE_URL: str = _env("OPENAI_API_BASE_URL")
    OPENAI_ORGANIZATION_ID: str = _env("OPENAI_ORGANIZATION_ID")
    ANTHROPIC_API_KEY: str = _env("ANTHROPIC_API_KEY")
    ANTHROPIC_API_BASE_URL: str = _env("ANTHROPIC_API_BASE_URL")

    # ── Chat endpoint ─────────────────────────────────────────────
    DEFAULT_TEMPERATURE: float = _env_float("DEFAULT_TEMPERATURE", 0.7)

    # ── Security ──────────────────────────────────────────────────
    # Comma-separated origins allowed by CORS middleware.
    # Use "*" for local dev only — always restrict in production.
    ALLOWED_ORIGINS: str = _env("ALLOWED_ORIGINS", "*")

    # ── Server ────────────────────────────────────────────────────
    HOST: str = _env("HOST", "0.0.0.0")
    PORT: int = _env_int("PORT", 8000)
    DEBUG_MODE: bool = _env_bool("DEBUG_MODE", False)

    def api_key_for(self, provider_type: str) -> str:
        return getattr(self, f"{provider_type.upper()}_API_KEY", "")

    def base_url_for(self, provider_type: str) -> str:
        return getattr(self, f"{provider_type.upper()}_API_BASE_URL", "")


settings = Settings()
