"""
Command router for chat input.

Any line starting with "/" (and longer than just "/") is command syntax:

    /summarize                  summarize the conversation
    /help                       list extension commands
    /<extension> <command> ...  run an extension command

Everything else is chat content for the LLM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

SUMMARIZE = "/summarize"
HELP = "help"


@dataclass(frozen=True)
class Summarize:
    """Generate a conversation summary."""


@dataclass(frozen=True)
class ShowHelp:
    """Render help for built-ins and extensions."""


@dataclass(frozen=True)
class MissingCommand:
    """An extension name was given without a command."""

    extension: str

    @property
    def message(self) -> str:
        return (
            f"Please specify a command for the '{self.extension}' extension. "
            "Type /help for available commands."
        )


@dataclass(frozen=True)
class RunExtensionCommand:
    """Dispatch to the extension registry."""

    extension: str
    command: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Chat:
    """Ordinary chat content."""

    text: str


Action = Union[Summarize, ShowHelp, MissingCommand, RunExtensionCommand, Chat]


def split_args(text: str) -> list[str]:
    """Split a string into arguments, respecting quotes.

    Single and double quotes both toggle one "inside quotes" flag and are
    dropped from the output. Unterminated quotes are tolerated; the partial
    token is still returned.

    >>> split_args('a "b c" d')
    ['a', 'b c', 'd']
    """
    args: list[str] = []
    current: list[str] = []
    in_quotes = False

    for c in text:
        if c in ('"', "'"):
            in_quotes = not in_quotes
        elif c == " " and not in_quotes:
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(c)

    if current:
        args.append("".join(current))

    return args


def route(text: str) -> Action:
    """Classify a line of user input."""
    text = text.strip()

    if text == SUMMARIZE:
        return Summarize()

    if not text.startswith("/") or len(text) <= 1:
        return Chat(text)

    extension, _, rest = text[1:].partition(" ")
    if extension == HELP:
        return ShowHelp()

    command, _, arg_string = rest.partition(" ")
    if not command:
        return MissingCommand(extension)

    return RunExtensionCommand(extension, command, split_args(arg_string))
