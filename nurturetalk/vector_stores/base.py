"""
Base class for vector store backends.

Every backend implements the same narrow capability set: write turns for a
conversation, search a conversation, and forget a conversation. Scoping by
conversation is the backend's job (namespace, metadata filter or user id).
"""

import time
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Dict

from ..models.memory import MemoryDocument, SearchResult


DEFAULT_TOP_K = 5


class VectorStore(ABC):
    """Abstract base class for vector stores."""

    name: str = "base"
    description: str = "Base vector store"

    @abstractmethod
    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        """
        Store conversation turns.

        Args:
            documents: Turns to embed and store
            conversation_id: Owning conversation
        """
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        """
        Search a conversation's memory.

        Args:
            query: Search query
            conversation_id: Conversation to search within
            top_k: Number of results to return

        Returns:
            Results in the order the backend ranked them
        """
        pass

    @abstractmethod
    def delete_conversation(self, conversation_id: str) -> None:
        """Remove every record stored for a conversation."""
        pass


def record_id(conversation_id: str, index: int) -> str:
    """Id for the index-th record of one upsert; the random suffix separates same-millisecond calls."""
    return f"{conversation_id}-{int(time.time() * 1000)}-{index}-{uuid.uuid4().hex[:8]}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def record_metadata(document: MemoryDocument, conversation_id: str) -> Dict[str, str]:
    """Metadata attached to every stored turn."""
    return {
        "text": document.as_text(),
        "role": document.role,
        "conversation_id": conversation_id,
        "timestamp": utc_timestamp(),
    }
