"""
Chat session state machine.

``ChatSession`` owns the message log and the two flags that drive the UI:
``pending`` (a request is in flight) and ``typing_active`` (a response is being
revealed). It never performs I/O. Each call to ``handle`` takes one event and
returns the effects the event loop should carry out; results of those effects
come back later as new events.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from mcgraph.tui.animation import TYPING_STEP, ThinkingIndicator, TypingAnimator
from mcgraph.tui.events import (
    Effect,
    Event,
    ExtensionResult,
    Exit,
    GenerateTitle,
    LLMResult,
    PersistMessage,
    Quit,
    Render,
    RenderHelp,
    RequestCompletion,
    Resize,
    RunExtension,
    ScheduleThinking,
    ScheduleTyping,
    ScrollToBottom,
    Submit,
    ThinkingTick,
    TypingTick,
)
from mcgraph.tui.models import ChatMessage
from mcgraph.tui.router import (
    Chat,
    MissingCommand,
    RunExtensionCommand,
    ShowHelp,
    Summarize,
    route,
)

if TYPE_CHECKING:
    from mcgraph.extensions import ExtensionRegistry

logger = logging.getLogger(__name__)

SUMMARY_PLACEHOLDER = "Generating conversation summary..."
SUMMARY_HEADER = "# Conversation Summary\n\n"

SUMMARY_PROMPT = """Below is a conversation between a user and an AI assistant.
Please provide a concise summary (about 3-5 sentences) of the main topics, questions, and information covered in this conversation.

CONVERSATION:
{history}

SUMMARY:"""


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    REVEALING = "revealing"


def welcome_message(llm_name: str) -> str:
    return (
        f"Welcome to McGraph Chat! Current LLM: {llm_name}\n"
        "Type your questions and press Enter to submit.\n"
        "Press Alt+Enter for a new line.\n"
        "Type Ctrl+C to quit."
    )


def welcome_back_message(llm_name: str, title: str) -> str:
    return (
        f"Welcome back to McGraph Chat! Current LLM: {llm_name}\n"
        f"Continuing conversation: {title}\n"
        "Type your questions and press Enter to submit. Type Ctrl+C to quit."
    )


class ChatSession:
    """Event-driven state of one chat session."""

    def __init__(
        self,
        registry: Optional["ExtensionRegistry"] = None,
        conversation_id: Optional[str] = None,
        history: Optional[Sequence[ChatMessage]] = None,
        welcome: Optional[str] = None,
        assistant_name: str = "McGraph",
        typing_step: int = TYPING_STEP,
    ):
        """Create a session.

        Args:
            registry: Extension registry used for /<ext> commands and /help.
            conversation_id: Store ID, only handed to persistence effects.
            history: Restored messages (welcome-back banner first). When given,
                ``welcome`` is ignored.
            welcome: Banner text for a fresh session.
            assistant_name: Label for assistant messages.
            typing_step: Characters revealed per typing tick.
        """
        self.registry = registry
        self.conversation_id = conversation_id
        self.assistant_name = assistant_name
        self.restored = bool(history)

        if history:
            self.messages: list[ChatMessage] = list(history)
        else:
            banner = welcome if welcome is not None else welcome_message("unknown")
            self.messages = [ChatMessage.assistant(banner, animate=False)]
        # Leading banner messages are UI chrome, not conversation
        self._banner_count = 1

        self.pending = False
        self.typing_active = False
        self.closed = False
        self.width = 80
        self.height = 24
        self.ready = False
        self.last_error: Optional[BaseException] = None

        self.thinking = ThinkingIndicator()
        self.typing = TypingAnimator(typing_step)

        self._handlers: dict[type, Callable[..., list[Effect]]] = {
            Submit: self._on_submit,
            Resize: self._on_resize,
            TypingTick: self._on_typing_tick,
            ThinkingTick: self._on_thinking_tick,
            LLMResult: self._on_llm_result,
            ExtensionResult: self._on_extension_result,
            Quit: self._on_quit,
        }

    # -- queries ------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        if self.pending:
            return SessionState.AWAITING_RESPONSE
        if self.typing_active:
            return SessionState.REVEALING
        return SessionState.IDLE

    @property
    def thinking_dots(self) -> int:
        return self.thinking.dots

    def summary_prompt(self) -> str:
        """Prompt asking the LLM to summarize the conversation so far."""
        parts = []
        for msg in self.messages[self._banner_count:]:
            if msg.is_system:
                continue
            speaker = "User" if msg.is_user else "Assistant"
            parts.append(f"{speaker}: {msg.content}\n\n")
        return SUMMARY_PROMPT.format(history="".join(parts))

    def record_error(self, error: BaseException) -> None:
        """Remember a background failure without interrupting the chat."""
        self.last_error = error
        logger.warning(f"Background operation failed: {error}")

    # -- event handling -----------------------------------------------------

    def start(self) -> list[Effect]:
        """Effects to run when the loop starts."""
        return [ScheduleThinking(), Render()]

    def handle(self, event: Event) -> list[Effect]:
        """Apply one event and return the follow-up effects.

        Events arriving after Quit are dropped, which makes late async
        results harmless.
        """
        if self.closed:
            logger.debug(f"Dropping {type(event).__name__} after quit")
            return []
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unknown event: {event!r}")
        return handler(event)

    def _append(self, message: ChatMessage) -> None:
        self.messages.append(message)

    def _on_submit(self, event: Submit) -> list[Effect]:
        # One request at a time, and never while a reply is still typing out
        if self.pending or self.typing_active:
            return []

        text = event.text.strip()
        if not text:
            return []

        action = route(text)

        if isinstance(action, Summarize):
            self._append(ChatMessage.system(SUMMARY_PLACEHOLDER))
            prompt = self.summary_prompt()
            self.pending = True
            return [RequestCompletion(prompt, is_summary=True), ScrollToBottom(), Render()]

        if isinstance(action, ShowHelp):
            self.pending = True
            return [RenderHelp(), Render()]

        if isinstance(action, MissingCommand):
            self._append(ChatMessage.system(action.message))
            return [ScrollToBottom(), Render()]

        if isinstance(action, RunExtensionCommand):
            self.pending = True
            return [RunExtension(action.extension, action.command, action.args), Render()]

        if isinstance(action, Chat):
            self._append(ChatMessage.user(action.text))
            effects: list[Effect] = [PersistMessage("user", action.text)]
            # Banner + first user message
            if len(self.messages) == 2:
                effects.append(GenerateTitle())
            self.pending = True
            effects += [RequestCompletion(action.text), ScrollToBottom(), Render()]
            return effects

        raise TypeError(f"Unhandled action: {action!r}")

    def _start_typing(self) -> list[Effect]:
        self.typing_active = True
        return [ScheduleTyping(), ScrollToBottom(), Render()]

    def _on_llm_result(self, event: LLMResult) -> list[Effect]:
        self.pending = False

        if event.error is not None:
            self._append(ChatMessage.assistant(f"Error: {event.error}", animate=False))
            return [ScrollToBottom(), Render()]

        if event.is_summary:
            # Summaries replace the placeholder and are never persisted
            summary = ChatMessage.system(SUMMARY_HEADER + event.response, animate=True)
            last = self.messages[-1] if self.messages else None
            if last is not None and last.is_system and last.content == SUMMARY_PLACEHOLDER:
                self.messages[-1] = summary
            else:
                self._append(summary)
            return self._start_typing()

        self._append(ChatMessage.assistant(event.response))
        return [PersistMessage("assistant", event.response)] + self._start_typing()

    def _on_extension_result(self, event: ExtensionResult) -> list[Effect]:
        self.pending = False

        if event.error is not None:
            self._append(ChatMessage.system(
                f"Error executing command /{event.extension} {event.command}: {event.error}"
            ))
            return [ScrollToBottom(), Render()]

        # /help output is shown as-is, without a result header
        if (event.extension, event.command) == ("help", "help"):
            content = event.response
        else:
            content = f"### Result of /{event.extension} {event.command}\n\n{event.response}"
        self._append(ChatMessage.system(content, animate=True))
        return self._start_typing()

    def _on_typing_tick(self, event: TypingTick) -> list[Effect]:
        if not self.typing_active:
            return []

        if self.typing.tick(self.messages):
            return [ScheduleTyping(), ScrollToBottom(), Render()]

        self.typing_active = False
        return [ScrollToBottom(), Render()]

    def _on_thinking_tick(self, event: ThinkingTick) -> list[Effect]:
        self.thinking.tick(self.pending)
        if self.pending:
            return [ScheduleThinking(), Render()]
        return [ScheduleThinking()]

    def _on_resize(self, event: Resize) -> list[Effect]:
        first = not self.ready
        self.width = event.width
        self.height = event.height
        self.ready = True

        if first and self.restored:
            return [ScrollToBottom(), Render()]
        return [Render()]

    def _on_quit(self, event: Quit) -> list[Effect]:
        self.closed = True
        return [Exit()]
