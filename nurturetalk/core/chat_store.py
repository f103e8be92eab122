"""
Chat session store.

Chats are kept newest first and written to a JSON file after every change.
There is always an active chat once the store has been used: deleting the
active chat activates the next one, and deleting the last chat creates a
fresh one.
"""

import json
import logging
import threading
from pathlib import Path
from typing import List, Dict, Optional

from pydantic import ValidationError

from ..errors import ChatNotFoundError
from ..models.chat import Chat, Message, NEW_CHAT_TITLE

logger = logging.getLogger(__name__)

TITLE_LENGTH = 30


def derive_title(chat: Chat) -> str:
    """Title from the first user message, only while the placeholder is set."""
    if chat.title != NEW_CHAT_TITLE:
        return chat.title
    first_user = next((m for m in chat.messages if m.role == "user"), None)
    if first_user is None:
        return chat.title
    return first_user.content[:TITLE_LENGTH]


class ChatStore:
    """JSON-file backed collection of chats."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._chats: List[Chat] = []
        self._active_id: Optional[str] = None
        self._lock = threading.RLock()
        self._load()

    # --- Persistence ---

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._chats = [Chat(**c) for c in data.get("chats", [])]
            self._active_id = data.get("active_chat_id")
        except (OSError, ValueError, ValidationError):
            logger.exception("Failed to load chat history from %s, starting empty", self.path)
            self._chats = []
            self._active_id = None
            return

        if self._active_id not in {c.id for c in self._chats}:
            self._active_id = self._chats[0].id if self._chats else None
        logger.info("Loaded %d chats from %s", len(self._chats), self.path)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "active_chat_id": self._active_id,
            "chats": [c.model_dump() for c in self._chats],
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)

    # --- Queries ---

    @property
    def active_chat_id(self) -> Optional[str]:
        return self._active_id

    def list(self) -> List[Chat]:
        with self._lock:
            return list(self._chats)

    def get(self, chat_id: str) -> Chat:
        with self._lock:
            return self._find(chat_id)

    def _find(self, chat_id: str) -> Chat:
        for chat in self._chats:
            if chat.id == chat_id:
                return chat
        raise ChatNotFoundError(chat_id)

    # --- Commands ---

    def create(self) -> Chat:
        """Start a new chat and make it active."""
        with self._lock:
            chat = Chat()
            self._chats.insert(0, chat)
            self._active_id = chat.id
            self._save()
        logger.info("Created chat %s", chat.id)
        return chat

    def ensure_active(self) -> Chat:
        """Return the active chat, creating one if the store is empty."""
        with self._lock:
            if self._active_id is None:
                return self.create()
            return self._find(self._active_id)

    def select(self, chat_id: str) -> Chat:
        with self._lock:
            chat = self._find(chat_id)
            self._active_id = chat.id
            self._save()
            return chat

    def append_messages(self, chat_id: str, messages: List[Message]) -> Chat:
        """Append messages and derive the title on the first exchange."""
        with self._lock:
            chat = self._find(chat_id)
            updated = chat.model_copy(update={"messages": [*chat.messages, *messages]})
            updated.title = derive_title(updated)
            self._replace(updated)
            self._save()
            return updated

    def rename(self, chat_id: str, title: str) -> Chat:
        with self._lock:
            updated = self._find(chat_id).model_copy(update={"title": title})
            self._replace(updated)
            self._save()
            return updated

    def delete(self, chat_id: str) -> Dict[str, Optional[str]]:
        """
        Delete a chat.

        Returns:
            {"deleted": id, "active_chat_id": id of the chat now active}
        """
        with self._lock:
            chat = self._find(chat_id)
            self._chats = [c for c in self._chats if c.id != chat.id]

            if not self._chats:
                fresh = Chat()
                self._chats = [fresh]
                self._active_id = fresh.id
            elif self._active_id == chat.id:
                self._active_id = self._chats[0].id

            self._save()
            active = self._active_id
        logger.info("Deleted chat %s", chat_id)
        return {"deleted": chat_id, "active_chat_id": active}

    def _replace(self, chat: Chat) -> None:
        self._chats = [chat if c.id == chat.id else c for c in self._chats]
