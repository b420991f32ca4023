"""
Conversation store for mcgraph.

Keeps one JSON file per conversation under ~/.mcgraph/conversations. Writes
come from background threads during a chat, so every operation holds a lock.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from mcgraph.config import MCGRAPH_DIR
from mcgraph.core.exceptions import ConversationNotFoundError, PersistenceError
from mcgraph.store.models import DEFAULT_TITLE, Conversation, StoredMessage

logger = logging.getLogger(__name__)

CONVERSATIONS_DIR = MCGRAPH_DIR / "conversations"

TITLE_MAX_LENGTH = 50
TITLE_TRUNCATE_AT = 47


def title_from_text(text: str) -> str:
    """Title for a conversation whose first user message is ``text``."""
    title = " ".join(text.split())
    if not title:
        return DEFAULT_TITLE
    if len(title) > TITLE_MAX_LENGTH:
        title = title[:TITLE_TRUNCATE_AT] + "..."
    return title


class ConversationStore:
    """File-backed conversation persistence."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root is not None else CONVERSATIONS_DIR
        self._lock = threading.RLock()

    # -- file helpers -------------------------------------------------------

    def _path(self, conversation_id: str) -> Path:
        return self.root / f"{conversation_id}.json"

    def _ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"cannot create {self.root}: {e}") from e

    def _read(self, path: Path) -> Conversation:
        try:
            data = json.loads(path.read_text())
            return Conversation.model_validate(data)
        except FileNotFoundError:
            raise ConversationNotFoundError(f"conversation not found: {path.stem}") from None
        except (OSError, ValueError, ValidationError) as e:
            raise PersistenceError(f"cannot read conversation {path.stem}: {e}") from e

    def _write(self, conversation: Conversation) -> None:
        self._ensure_root()
        path = self._path(conversation.id)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(conversation.model_dump_json(indent=2))
            tmp.replace(path)
        except OSError as e:
            raise PersistenceError(f"cannot write conversation {conversation.id}: {e}") from e

    # -- conversations ------------------------------------------------------

    def create_conversation(
        self, title: str = DEFAULT_TITLE, model: Optional[str] = None
    ) -> Conversation:
        """Create and persist an empty conversation."""
        conversation = Conversation(title=title, model=model)
        with self._lock:
            self._write(conversation)
        logger.info(f"Created conversation {conversation.id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation:
        """Load a conversation by its full ID.

        Raises:
            ConversationNotFoundError: If no such conversation exists.
            PersistenceError: If the file cannot be read or parsed.
        """
        with self._lock:
            return self._read(self._path(conversation_id))

    def find_conversation(self, prefix: str) -> Conversation:
        """Load a conversation by full ID or unique ID prefix (e.g. the short ID)."""
        prefix = prefix.strip()
        if not prefix:
            raise ConversationNotFoundError("no conversation ID given")

        with self._lock:
            exact = self._path(prefix)
            if exact.exists():
                return self._read(exact)

            if not self.root.is_dir():
                raise ConversationNotFoundError(f"conversation not found: {prefix}")
            matches = sorted(self.root.glob(f"{prefix}*.json"))
            if not matches:
                raise ConversationNotFoundError(f"conversation not found: {prefix}")
            if len(matches) > 1:
                raise PersistenceError(
                    f"ambiguous conversation ID '{prefix}' matches {len(matches)} conversations"
                )
            return self._read(matches[0])

    def list_conversations(self) -> list[Conversation]:
        """All readable conversations, most recently updated first."""
        results: list[Conversation] = []
        with self._lock:
            if not self.root.is_dir():
                return []
            for path in self.root.glob("*.json"):
                try:
                    results.append(self._read(path))
                except PersistenceError as e:
                    logger.warning(f"Skipping unreadable conversation file {path.name}: {e}")
        return sorted(results, key=lambda c: c.updated_at, reverse=True)

    def update_title(self, conversation_id: str, title: str) -> Conversation:
        with self._lock:
            conversation = self.get_conversation(conversation_id)
            conversation.title = title
            conversation.touch()
            self._write(conversation)
        return conversation

    def delete_conversation(self, conversation_id: str) -> None:
        with self._lock:
            path = self._path(conversation_id)
            try:
                path.unlink()
            except FileNotFoundError:
                raise ConversationNotFoundError(
                    f"conversation not found: {conversation_id}"
                ) from None
            except OSError as e:
                raise PersistenceError(f"cannot delete conversation {conversation_id}: {e}") from e
        logger.info(f"Deleted conversation {conversation_id}")

    # -- messages -----------------------------------------------------------

    def add_message(self, conversation_id: str, role: str, content: str) -> StoredMessage:
        """Append a message to a conversation and persist it."""
        with self._lock:
            conversation = self.get_conversation(conversation_id)
            message = StoredMessage(conversation_id=conversation_id, role=role, content=content)
            conversation.messages.append(message)
            conversation.touch()
            self._write(conversation)
        return message

    def get_messages(self, conversation_id: str) -> list[StoredMessage]:
        """Messages of a conversation in the order they were added."""
        return list(self.get_conversation(conversation_id).messages)

    def generate_title(self, conversation_id: str) -> str:
        """Title the conversation after its first user message and save it."""
        with self._lock:
            conversation = self.get_conversation(conversation_id)
            first = next((m for m in conversation.messages if m.is_user), None)
            title = title_from_text(first.content) if first else DEFAULT_TITLE
            conversation.title = title
            conversation.touch()
            self._write(conversation)
        return title
