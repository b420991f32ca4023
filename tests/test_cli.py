#!/usr/bin/env python3
"""
Tests for the mcg command-line interface.
"""

import json
from unittest.mock import patch

import pytest

import mcgraph.config.config as config_module
from mcgraph import __version__
from mcgraph.cli.main import build_parser, main
from mcgraph.config import ConfigManager
from mcgraph.logging import close_logging
from mcgraph.store import ConversationStore


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Redirect every ~/.mcgraph path into tmp_path."""
    root = tmp_path / ".mcgraph"
    monkeypatch.setattr(ConfigManager, "CONFIG_DIR", root)
    monkeypatch.setattr(ConfigManager, "CONFIG_FILE", root / "config.json")
    monkeypatch.setattr("mcgraph.store.store.CONVERSATIONS_DIR", root / "conversations")
    monkeypatch.setattr("mcgraph.extensions.config.EXTENSIONS_CONFIG_FILE", root / "extensions.json")
    monkeypatch.setattr("mcgraph.extensions.registry.USER_EXTENSIONS_DIR", root / "extensions")
    monkeypatch.setattr("mcgraph.logging.LOG_FILE", root / "logs" / "mcgraph.log")
    config_module._manager = None
    yield root
    config_module._manager = None
    close_logging()


class FakeProvider:
    def get_response(self, prompt):
        return f"answer to: {prompt}"


# ============================================================================
# Parser Tests
# ============================================================================

class TestParser:
    """Tests for argument parsing."""

    def test_chat_options(self):
        args = build_parser().parse_args(["chat", "-c", "abc123", "--llm", "claude", "--no-extensions"])
        assert args.continue_id == "abc123"
        assert args.llm == "claude"
        assert args.no_extensions

    def test_config_set_parsing(self):
        args = build_parser().parse_args(["config", "--set", "llm=gemini", "--set", "request_timeout="])
        assert args.set == [("llm", "gemini"), ("request_timeout", None)]

    def test_config_set_requires_equals(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["config", "--set", "llm"])

    def test_ask_collects_words(self):
        args = build_parser().parse_args(["ask", "what", "is", "Go"])
        assert args.question == ["what", "is", "Go"]


# ============================================================================
# Command Tests
# ============================================================================

class TestCommands:
    """Tests for individual subcommands."""

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out.strip() == f"mcgraph {__version__}"

    def test_pick(self, home, capsys):
        assert main(["pick", "Claude"]) == 0
        data = json.loads((home / "config.json").read_text())
        assert data["llm"] == "claude"
        assert "ANTHROPIC_API_KEY" in capsys.readouterr().out

    def test_pick_invalid(self, home, capsys):
        assert main(["pick", "bard"]) == 1
        assert "invalid LLM type: bard" in capsys.readouterr().err

    def test_config_set_and_unset(self, home, capsys):
        assert main(["config", "--set", "typing_speed=8"]) == 0
        assert "typing_speed: 8" in capsys.readouterr().out

        assert main(["config", "--unset", "typing_speed"]) == 0
        assert "typing_speed" not in capsys.readouterr().out

    def test_config_reset(self, home, capsys):
        assert main(["config", "--set", "assistant_name=Graph"]) == 0
        capsys.readouterr()

        assert main(["config", "--reset"]) == 0
        out = capsys.readouterr().out
        assert "assistant_name" not in out
        assert not (home / "config.json").exists()

    def test_config_rejects_zero_typing_speed(self, home, capsys):
        assert main(["config", "--set", "typing_speed=0"]) == 1
        assert "Invalid value for typing_speed" in capsys.readouterr().err

    def test_config_unknown_key(self, home, capsys):
        assert main(["config", "--set", "colour=blue"]) == 1
        assert "Unknown config key" in capsys.readouterr().err

    def test_ext_enable_disable(self, home, capsys):
        assert main(["ext", "enable"]) == 0
        assert json.loads((home / "extensions.json").read_text())["enabled"] is True

        assert main(["ext", "disable"]) == 0
        assert json.loads((home / "extensions.json").read_text())["enabled"] is False

    def test_ext_list_disabled(self, home, capsys):
        assert main(["ext"]) == 0
        assert "Extensions are disabled" in capsys.readouterr().out

    def test_ext_list_enabled(self, home, capsys):
        main(["ext", "enable"])
        capsys.readouterr()
        assert main(["ext", "list"]) == 0
        out = capsys.readouterr().out
        assert "/system - Basic system commands" in out
        assert "read: Read file contents" in out

    def test_llms(self, home, capsys, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk")
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert main(["llms"]) == 0
        lines = capsys.readouterr().out.splitlines()
        openai = next(line for line in lines if " openai " in line)
        gemini = next(line for line in lines if " gemini " in line)
        assert openai.lstrip().startswith("*")
        assert openai.endswith("ready")
        assert gemini.endswith("needs GEMINI_API_KEY")

    def test_list_empty(self, home, capsys):
        assert main(["list"]) == 0
        assert "No conversations yet" in capsys.readouterr().out

    def test_ask_persists_conversation(self, home, capsys):
        with patch("mcgraph.llm.get_provider", return_value=FakeProvider()):
            assert main(["ask", "what", "is", "a", "slice?"]) == 0
        assert capsys.readouterr().out.strip() == "answer to: what is a slice?"

        (conversation,) = ConversationStore(root=home / "conversations").list_conversations()
        assert conversation.title == "what is a slice?"
        assert [m.role for m in conversation.messages] == ["user", "assistant"]

        assert main(["list", "--json"]) == 0
        listed = json.loads(capsys.readouterr().out)
        assert listed[0]["id"] == conversation.id
        assert listed[0]["messages"] == 2

        assert main(["history", conversation.short_id]) == 0
        out = capsys.readouterr().out
        assert "You: what is a slice?" in out
        assert "McGraph: answer to: what is a slice?" in out

    def test_delete(self, home, capsys):
        store = ConversationStore(root=home / "conversations")
        conversation = store.create_conversation(title="Old chat")

        assert main(["delete", conversation.short_id]) == 0
        assert "Deleted conversation" in capsys.readouterr().out
        assert store.list_conversations() == []

    def test_history_not_found(self, home, capsys):
        assert main(["history", "deadbeef"]) == 1
        assert "conversation not found" in capsys.readouterr().err


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
