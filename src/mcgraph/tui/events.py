"""
Events consumed and effects produced by the chat session.

Events flow into ``ChatSession.handle``; effects flow out to the event loop,
which performs the side effects and feeds results back in as events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


# ---------------------------------------------------------------------------
# Events (loop -> session)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Submit:
    """User pressed Enter."""
    text: str


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class TypingTick:
    pass


@dataclass(frozen=True)
class ThinkingTick:
    pass


@dataclass(frozen=True)
class LLMResult:
    """Outcome of a completion request."""
    response: str = ""
    error: Optional[BaseException] = None
    is_summary: bool = False


@dataclass(frozen=True)
class ExtensionResult:
    """Outcome of an extension command (or of /help)."""
    extension: str
    command: str
    response: str = ""
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class Quit:
    pass


Event = Union[Submit, Resize, TypingTick, ThinkingTick, LLMResult, ExtensionResult, Quit]


# ---------------------------------------------------------------------------
# Effects (session -> loop)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RequestCompletion:
    """Ask the LLM provider for a completion, off the loop."""
    prompt: str
    is_summary: bool = False


@dataclass(frozen=True)
class RunExtension:
    """Execute an extension command, off the loop."""
    extension: str
    command: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RenderHelp:
    """Build the help text and deliver it as an ExtensionResult."""


@dataclass(frozen=True)
class PersistMessage:
    """Fire-and-forget write to the conversation store."""
    role: str
    content: str


@dataclass(frozen=True)
class GenerateTitle:
    """Fire-and-forget title generation after the first user message."""


@dataclass(frozen=True)
class ScheduleTyping:
    pass


@dataclass(frozen=True)
class ScheduleThinking:
    pass


@dataclass(frozen=True)
class ScrollToBottom:
    pass


@dataclass(frozen=True)
class Render:
    pass


@dataclass(frozen=True)
class Exit:
    pass


Effect = Union[
    RequestCompletion,
    RunExtension,
    RenderHelp,
    PersistMessage,
    GenerateTitle,
    ScheduleTyping,
    ScheduleThinking,
    ScrollToBottom,
    Render,
    Exit,
]
