"""
Interactive chat session for mcgraph.

The session state machine (``ChatSession``) is pure and event driven;
``ChatApp`` runs it inside a prompt_toolkit full-screen application.
"""

from mcgraph.tui.animation import ThinkingIndicator, TypingAnimator
from mcgraph.tui.models import ChatMessage
from mcgraph.tui.router import route, split_args
from mcgraph.tui.state import (
    ChatSession,
    SessionState,
    welcome_back_message,
    welcome_message,
)


def __getattr__(name):
    # ChatApp pulls in the prompt_toolkit application machinery
    if name == "ChatApp":
        from mcgraph.tui.app import ChatApp
        return ChatApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ChatApp",
    "ChatMessage",
    "ChatSession",
    "SessionState",
    "ThinkingIndicator",
    "TypingAnimator",
    "route",
    "split_args",
    "welcome_message",
    "welcome_back_message",
]
