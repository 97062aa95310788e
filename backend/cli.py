"""AI Chat CLI — one-shot prompts, provider listing, and dev server.

Usage:
    python cli.py init                      Create .env from .env.example
    python cli.py providers                 List supported providers
    python cli.py chat "PROMPT" [--stream]  Send a prompt to the configured provider
    python cli.py dev                       Start uvicorn with hot-reload
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger("ai-cli")


def cmd_init(args):
    """Copy .env.example → .env (if not exists)."""
    root = Path(__file__).resolve().parent.parent
    env_example = root / ".env.example"
    env_file = root / ".env"
    if not env_file.exists() and env_example.exists():
        shutil.copy(env_example, env_file)
        logger.info("[+] Created .env from .env.example — add your API key!")
    elif env_file.exists():
        logger.info("[=] .env already exists")
    else:
        logger.warning("[!] No .env.example found")


def cmd_providers(args):
    """Print every supported provider type with its default model."""
    from llm.providers import SUPPORTED_PROVIDERS, default_model_for
    from settings import settings

    active = settings.AI_PROVIDER.strip().lower()
    for name in SUPPORTED_PROVIDERS:
        marker = "*" if name == active else " "
        key = "key set" if settings.api_key_for(name) else "no key"
        print(f" {marker} {name:<10} {default_model_for(name):<28} ({key})")


def _build_provider(args):
    from llm.client import create_custom_provider, load_default_provider

    if args.provider or args.model:
        from settings import settings

        overrides = {"model": args.model} if args.model else {}
        return create_custom_provider(args.provider or settings.AI_PROVIDER, **overrides)
    return load_default_provider()


async def _run_chat(args, provider) -> int:
    from llm.client import generate_text, generate_text_stream
    from llm.providers.base import RequestOptions

    options = RequestOptions(
        prompt=args.prompt,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        system_message=args.system,
    )

    if not args.stream:
        print(await generate_text(options, provider))
        return 0

    async for event in generate_text_stream(options, provider):
        if event.error:
            print()
            logger.error(f"[!] {event.error}")
            return 1
        if event.done:
            break
        sys.stdout.write(event.text)
        sys.stdout.flush()
    print()
    return 0


def cmd_chat(args):
    """Send a single prompt and print the response."""
    from llm.providers.base import ConfigurationError, GenerationError

    try:
        provider = _build_provider(args)
        code = asyncio.run(_run_chat(args, provider))
    except (ConfigurationError, GenerationError) as e:
        logger.error(f"[!] {e}")
        sys.exit(1)
    if code:
        sys.exit(code)


def cmd_dev(args):
    """Start uvicorn dev server with hot-reload."""
    import uvicorn

    from settings import settings

    uvicorn.run(
        "main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-chat",
        description="AI provider facade — chat from the terminal",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands")

    sub.add_parser("init", help="Create .env from .env.example")
    sub.add_parser("providers", help="List supported providers")

    p_chat = sub.add_parser("chat", help="Send a prompt")
    p_chat.add_argument("prompt", help="Prompt text")
    p_chat.add_argument("--stream", action="store_true", help="Stream the response")
    p_chat.add_argument("--system", default=None, help="System instruction")
    p_chat.add_argument("--temperature", type=float, default=None)
    p_chat.add_argument("--max-tokens", type=int, default=None, dest="max_tokens")
    p_chat.add_argument("--provider", default=None, help="Override AI_PROVIDER")
    p_chat.add_argument("--model", default=None, help="Override the model id")

    p_dev = sub.add_parser("dev", help="Start dev server")
    p_dev.add_argument("--host", default=None)
    p_dev.add_argument("--port", type=int, default=None)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        cmd_init(args)
    elif args.command == "providers":
        cmd_providers(args)
    elif args.command == "chat":
        cmd_chat(args)
    elif args.command == "dev":
        cmd_dev(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
