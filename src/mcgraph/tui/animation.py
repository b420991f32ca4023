"""
Typing reveal and thinking indicator.

Both are tick-driven: the event loop delivers a tick, the animation updates
state and says whether it wants another one. Timing lives in the loop.
"""

from __future__ import annotations

import math
from typing import Sequence

from mcgraph.tui.models import ChatMessage

# Milliseconds between typing ticks
TYPING_INTERVAL_MS = 20
# Characters revealed per typing tick
TYPING_STEP = 4
# Milliseconds between thinking indicator ticks
THINKING_INTERVAL_MS = 200


class ThinkingIndicator:
    """Cycling "Thinking..." dots shown while a request is pending."""

    MAX_DOTS = 3

    def __init__(self, dots: int = 1):
        self.dots = dots

    def tick(self, pending: bool) -> bool:
        """Advance 1 -> 2 -> 3 -> 1 while pending.

        Always returns True: the indicator keeps rescheduling so it is warm
        the moment a request starts.
        """
        if pending:
            self.dots = (self.dots % self.MAX_DOTS) + 1
        return True

    def label(self) -> str:
        return "Thinking" + "." * self.dots


class TypingAnimator:
    """Reveals the newest non-user message a few characters per tick."""

    def __init__(self, step: int = TYPING_STEP):
        if step < 1:
            raise ValueError("typing step must be at least 1")
        self.step = step

    @staticmethod
    def target(messages: Sequence[ChatMessage]) -> ChatMessage | None:
        """The message being revealed, if any."""
        if not messages:
            return None
        last = messages[-1]
        if last.is_user or last.is_complete:
            return None
        return last

    def tick(self, messages: Sequence[ChatMessage]) -> bool:
        """Reveal the next chunk.

        Returns:
            True if another tick is needed, False once the message is complete
            (or there is nothing to reveal).
        """
        message = self.target(messages)
        if message is None:
            return False

        message.reveal(self.step)
        if message.remaining > 0:
            return True

        message.complete()
        return False

    def ticks_needed(self, length: int) -> int:
        """Number of ``tick`` calls that finish a ``length``-character message from empty.

        An empty message still takes one tick to be marked complete.
        """
        return max(1, math.ceil(length / self.step))
