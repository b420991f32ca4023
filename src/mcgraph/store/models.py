"""
Conversation data models.

Pydantic models for conversations persisted by ConversationStore.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_TITLE = "New Conversation"


def _new_id() -> str:
    return str(uuid.uuid4())


class StoredMessage(BaseModel):
    """A single persisted message."""

    id: str = Field(default_factory=_new_id)
    conversation_id: str
    role: str  # "user" or "assistant"
    content: str
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_user(self) -> bool:
        return self.role == "user"


class Conversation(BaseModel):
    """A conversation with its full message history."""

    id: str = Field(default_factory=_new_id)
    title: str = DEFAULT_TITLE
    model: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    messages: list[StoredMessage] = Field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.id[:8]

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now()
