"""
Tab completion for slash commands in the chat input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from prompt_toolkit.completion import Completer, Completion

if TYPE_CHECKING:
    from mcgraph.extensions import ExtensionRegistry

SESSION_COMMANDS = {
    "/help": "List extensions and their commands",
    "/summarize": "Summarize the conversation so far",
}


class SlashCommandCompleter(Completer):
    """Completes /help, /summarize and every registered "/<ext> <cmd>"."""

    def __init__(self, registry: Optional["ExtensionRegistry"] = None):
        self.registry = registry

    def commands(self) -> dict[str, str]:
        result = dict(SESSION_COMMANDS)
        if self.registry is not None and self.registry.is_enabled:
            result.update(self.registry.get_completions())
        return result

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        # Only the first line of the input can be a command
        if not text.startswith("/") or "\n" in text:
            return

        for cmd, description in self.commands().items():
            if cmd.startswith(text):
                yield Completion(cmd, start_position=-len(text), display_meta=description)
