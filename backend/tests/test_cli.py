"""Tests for CLI commands (providers, chat, init) and argument parsing."""

from unittest.mock import patch

import pytest

import cli
from llm.providers.base import ConfigurationError, GenerationError


def _chat_args(*extra):
    return cli.build_parser().parse_args(["chat", "2+2?", *extra])


# ═══════════════════════════════════════════════════════════════════════════
#  Argument parsing
# ═══════════════════════════════════════════════════════════════════════════

class TestParser:
    def test_chat_defaults(self):
        args = _chat_args()
        assert args.command == "chat"
        assert args.prompt == "2+2?"
        assert args.stream is False
        assert args.temperature is None
        assert args.max_tokens is None
        assert args.provider is None

    def test_chat_flags(self):
        args = _chat_args("--stream", "--system", "Be brief.", "--temperature", "0",
                          "--max-tokens", "32", "--provider", "anthropic", "--model", "m")
        assert args.stream is True
        assert args.system == "Be brief."
        assert args.temperature == 0.0
        assert args.max_tokens == 32
        assert args.provider == "anthropic"
        assert args.model == "m"

    def test_no_command_prints_help(self, capsys):
        cli.main([])
        assert "usage" in capsys.readouterr().out.lower()


# ═══════════════════════════════════════════════════════════════════════════
#  providers
# ═══════════════════════════════════════════════════════════════════════════

class TestProvidersCommand:
    def test_lists_every_supported_provider(self, capsys):
        cli.main(["providers"])
        out = capsys.readouterr().out
        assert "openai" in out and "gpt-4o" in out
        assert "anthropic" in out and "claude-3-opus-20240229" in out


# ═══════════════════════════════════════════════════════════════════════════
#  chat
# ═══════════════════════════════════════════════════════════════════════════

class TestChatCommand:
    def test_buffered(self, scripted_provider, capsys):
        provider = scripted_provider(text="4")
        with patch("llm.client.load_default_provider", return_value=provider):
            cli.cmd_chat(_chat_args("--temperature", "0"))
        assert capsys.readouterr().out == "4\n"
        assert provider.requests[0].temperature == 0.0

    def test_streamed(self, scripted_provider, capsys):
        provider = scripted_provider(chunks=["1", "2", "3"])
        with patch("llm.client.load_default_provider", return_value=provider):
            cli.cmd_chat(_chat_args("--stream"))
        assert capsys.readouterr().out == "123\n"

    def test_stream_error_exits_nonzero(self, scripted_provider):
        provider = scripted_provider(chunks=["1"], stream_error=RuntimeError("dropped"))
        with patch("llm.client.load_default_provider", return_value=provider):
            with pytest.raises(SystemExit) as exc_info:
                cli.cmd_chat(_chat_args("--stream"))
        assert exc_info.value.code == 1

    def test_generation_error_exits_nonzero(self, scripted_provider):
        provider = scripted_provider(error=GenerationError("boom"))
        with patch("llm.client.load_default_provider", return_value=provider):
            with pytest.raises(SystemExit) as exc_info:
                cli.cmd_chat(_chat_args())
        assert exc_info.value.code == 1

    def test_configuration_error_exits_nonzero(self):
        with patch(
            "llm.client.load_default_provider",
            side_effect=ConfigurationError("AI provider initialization failed"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                cli.cmd_chat(_chat_args())
        assert exc_info.value.code == 1

    def test_provider_flag_builds_custom_provider(self, scripted_provider, capsys):
        provider = scripted_provider(text="hi")
        with patch("llm.client.create_custom_provider", return_value=provider) as mock_custom:
            cli.cmd_chat(_chat_args("--provider", "anthropic", "--model", "claude-3-haiku-20240307"))
        mock_custom.assert_called_once_with("anthropic", model="claude-3-haiku-20240307")
        assert capsys.readouterr().out == "hi\n"


# ═══════════════════════════════════════════════════════════════════════════
#  init
# ═══════════════════════════════════════════════════════════════════════════

class TestInitCommand:
    def test_copies_env_example(self, tmp_path, monkeypatch):
        backend = tmp_path / "backend"
        backend.mkdir()
        (tmp_path / ".env.example").write_text("AI_PROVIDER=openai\n")
        monkeypatch.setattr(cli, "__file__", str(backend / "cli.py"))
        cli.cmd_init(None)
        assert (tmp_path / ".env").read_text() == "AI_PROVIDER=openai\n"

    def test_existing_env_untouched(self, tmp_path, monkeypatch):
        backend = tmp_path / "backend"
        backend.mkdir()
        (tmp_path / ".env.example").write_text("AI_PROVIDER=openai\n")
        (tmp_path / ".env").write_text("AI_PROVIDER=anthropic\n")
        monkeypatch.setattr(cli, "__file__", str(backend / "cli.py"))
        cli.cmd_init(None)
        assert (tmp_path / ".env").read_text() == "AI_PROVIDER=anthropic\n"
