"""
Chat message model for the TUI.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class ChatMessage(BaseModel):
    """A single message in the chat log.

    ``content`` is the full text; ``visible_content`` is the prefix shown so
    far by the typing animation. Once ``is_complete`` is set the two are equal.
    """

    model_config = {"validate_assignment": True}

    content: str
    visible_content: str = ""
    is_user: bool = False
    is_system: bool = False
    is_complete: bool = False
    timestamp: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _check_visible_prefix(self) -> "ChatMessage":
        if not self.content.startswith(self.visible_content):
            raise ValueError("visible_content must be a prefix of content")
        if self.is_complete and self.visible_content != self.content:
            raise ValueError("complete message must show its full content")
        return self

    @classmethod
    def user(cls, text: str) -> "ChatMessage":
        """User messages show immediately."""
        return cls(content=text, visible_content=text, is_user=True, is_complete=True)

    @classmethod
    def assistant(cls, text: str, animate: bool = True) -> "ChatMessage":
        if animate:
            return cls(content=text)
        return cls(content=text, visible_content=text, is_complete=True)

    @classmethod
    def system(cls, text: str, animate: bool = False) -> "ChatMessage":
        if animate:
            return cls(content=text, is_system=True)
        return cls(content=text, visible_content=text, is_system=True, is_complete=True)

    @classmethod
    def restored(cls, content: str, is_user: bool, timestamp: datetime | None = None) -> "ChatMessage":
        """A historical message; no reveal animation is replayed."""
        return cls(
            content=content,
            visible_content=content,
            is_user=is_user,
            is_complete=True,
            timestamp=timestamp or datetime.now(),
        )

    @property
    def role(self) -> str:
        if self.is_user:
            return "user"
        return "system" if self.is_system else "assistant"

    @property
    def remaining(self) -> int:
        return len(self.content) - len(self.visible_content)

    def reveal(self, count: int) -> int:
        """Show up to ``count`` more characters. Returns how many were added."""
        count = max(0, min(count, self.remaining))
        if count:
            self.visible_content = self.content[: len(self.visible_content) + count]
        return count

    def complete(self) -> None:
        # Order matters: the validator rejects is_complete with a partial prefix
        self.visible_content = self.content
        self.is_complete = True

    def role_label(self, assistant_name: str) -> str:
        if self.is_user:
            return "You"
        if self.is_system:
            return "System"
        return assistant_name
