"""Conversation persistence for mcgraph."""

from mcgraph.store.models import DEFAULT_TITLE, Conversation, StoredMessage
from mcgraph.store.store import CONVERSATIONS_DIR, ConversationStore, title_from_text

__all__ = [
    "CONVERSATIONS_DIR",
    "DEFAULT_TITLE",
    "Conversation",
    "ConversationStore",
    "StoredMessage",
    "title_from_text",
]
