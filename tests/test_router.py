#!/usr/bin/env python3
"""
Tests for the chat input router.
"""

import pytest

from mcgraph.tui.router import (
    Chat,
    MissingCommand,
    RunExtensionCommand,
    ShowHelp,
    Summarize,
    route,
    split_args,
)


# ============================================================================
# Argument Splitting Tests
# ============================================================================

class TestSplitArgs:
    """Tests for quote-aware argument splitting."""

    def test_quoted_argument(self):
        assert split_args('a "b c" d') == ["a", "b c", "d"]

    def test_empty(self):
        assert split_args("") == []

    def test_unterminated_quote_flushes_partial_token(self):
        assert split_args('a "b') == ["a", "b"]

    def test_single_quotes(self):
        assert split_args("grep 'two words' file") == ["grep", "two words", "file"]

    def test_mixed_quotes_share_one_flag(self):
        """Either quote character toggles the same state."""
        assert split_args("\"a b' c") == ["a b c"]

    def test_repeated_spaces(self):
        assert split_args("a   b ") == ["a", "b"]

    def test_quotes_inside_token(self):
        assert split_args('x"y z"w') == ["xy zw"]


# ============================================================================
# Routing Tests
# ============================================================================

class TestRoute:
    """Tests for input classification."""

    def test_summarize(self):
        assert route("/summarize") == Summarize()

    def test_summarize_is_trimmed(self):
        assert route("  /summarize \n") == Summarize()

    def test_help(self):
        assert route("/help") == ShowHelp()

    def test_help_ignores_trailing_text(self):
        assert route("/help me") == ShowHelp()

    def test_missing_command(self):
        action = route("/ext")
        assert action == MissingCommand("ext")
        assert action.message == (
            "Please specify a command for the 'ext' extension. "
            "Type /help for available commands."
        )

    def test_extension_command_with_args(self):
        assert route("/ext cmd a b") == RunExtensionCommand("ext", "cmd", ["a", "b"])

    def test_extension_command_without_args(self):
        assert route("/system pwd") == RunExtensionCommand("system", "pwd", [])

    def test_extension_command_quoted_args(self):
        action = route('/system read "my file.txt"')
        assert action == RunExtensionCommand("system", "read", ["my file.txt"])

    def test_slash_alone_is_chat(self):
        assert route("/") == Chat("/")

    @pytest.mark.parametrize("text", ["hello", "what does a/b mean?", " hi there "])
    def test_plain_text_is_chat(self, text):
        assert route(text) == Chat(text.strip())

    def test_summarize_with_args_is_extension(self):
        """Only the exact /summarize line is reserved."""
        assert route("/summarize now") == RunExtensionCommand("summarize", "now", [])


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
