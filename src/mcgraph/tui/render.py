"""
Rendering of the chat log into prompt_toolkit formatted text.

Produces ``(style, text)`` fragments only; layout, wrapping and cursor work
are left to prompt_toolkit.
"""

from __future__ import annotations

import re
from typing import Sequence

from prompt_toolkit.styles import Style

from mcgraph.tui.models import ChatMessage

StyleAndText = tuple[str, str]

# Fenced code blocks, including an unterminated one still being typed out
_CODE_FENCE = re.compile(r"```[^\n]*\n?.*?(?:```|$)", re.DOTALL)


def get_style() -> Style:
    """Get the chat UI style."""
    return Style.from_dict({
        "timestamp": "#a0a0a0 italic",
        "user": "#5dade2 bold",
        "assistant": "#58d68d bold",
        "system": "#ff9933 italic",
        "system-text": "#ff9933",
        "code": "#f8f8f2 bg:#272822",
        "rule": "#444444",
        "status": "reverse",
        "thinking": "#f4d03f italic",
    })


def highlight_code(text: str) -> list[StyleAndText]:
    """Style fenced code blocks; everything else is plain text."""
    fragments: list[StyleAndText] = []
    pos = 0
    for match in _CODE_FENCE.finditer(text):
        if match.start() > pos:
            fragments.append(("", text[pos:match.start()]))
        fragments.append(("class:code", match.group(0)))
        pos = match.end()
    if pos < len(text):
        fragments.append(("", text[pos:]))
    return fragments


def render_message(message: ChatMessage, assistant_name: str) -> list[StyleAndText]:
    """Timestamp, role label and text of one message."""
    fragments: list[StyleAndText] = [
        ("class:timestamp", message.timestamp.strftime("%H:%M:%S")),
        ("", " "),
    ]

    label = message.role_label(assistant_name)
    if message.is_user:
        fragments += [("class:user", label), ("", ": "), ("", message.content)]
    elif message.is_system:
        fragments += [
            ("class:system", label),
            ("", ": "),
            ("class:system-text", message.visible_content),
        ]
    else:
        fragments += [("class:assistant", label), ("", ": ")]
        fragments += highlight_code(message.visible_content)

    fragments.append(("", "\n\n"))
    return fragments


def render_messages(
    messages: Sequence[ChatMessage],
    width: int,
    assistant_name: str = "McGraph",
) -> list[StyleAndText]:
    """Render the whole log, with a full-width rule between messages."""
    fragments: list[StyleAndText] = []
    for i, message in enumerate(messages):
        fragments += render_message(message, assistant_name)
        if i < len(messages) - 1:
            fragments.append(("class:rule", "-" * max(width, 1) + "\n\n"))
    return fragments


def render_plain(messages: Sequence[ChatMessage], width: int, assistant_name: str = "McGraph") -> str:
    """Text-only rendering (used by tests and the history command)."""
    return "".join(text for _, text in render_messages(messages, width, assistant_name))
