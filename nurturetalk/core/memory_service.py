"""
Memory service wrapping the configured vector store.

Direct calls (``upsert``, ``search``, ``forget``) raise
:class:`VectorStoreError` on backend failure. ``remember_turn`` is the
write-back used after a chat reply: best effort and at most once. A failure
is logged and counted, never retried, and never reaches the user, so memory
may lag behind the visible transcript.
"""

import logging
import threading
import time
from typing import List, Optional, Tuple

from ..errors import VectorStoreError
from ..models.memory import MemoryDocument, SearchResult
from ..vector_stores.base import VectorStore, DEFAULT_TOP_K

logger = logging.getLogger(__name__)


class MemoryService:
    """Service for conversation memory operations."""

    def __init__(self, store: VectorStore, top_k: int = DEFAULT_TOP_K):
        self.store = store
        self.top_k = top_k
        self._failed_writes = 0
        self._lock = threading.Lock()

    @property
    def backend(self) -> str:
        return self.store.name

    @property
    def failed_writes(self) -> int:
        """Background writes dropped since startup."""
        return self._failed_writes

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        """Store turns for a conversation."""
        logger.info(
            "[%s] Upsert started | conversation=%s docs=%d",
            self.backend, conversation_id, len(documents)
        )
        start = time.perf_counter()
        try:
            self.store.upsert(documents, conversation_id)
        except Exception as e:
            logger.exception("[%s] Upsert failed | conversation=%s", self.backend, conversation_id)
            raise VectorStoreError(f"{self.backend} upsert failed") from e
        logger.info(
            "[%s] Upsert finished in %.1fms", self.backend, (time.perf_counter() - start) * 1000
        )

    def search(
        self,
        query: str,
        conversation_id: str,
        limit: Optional[int] = None
    ) -> Tuple[List[SearchResult], float]:
        """
        Search a conversation's memory.

        Returns:
            (results, latency_ms)
        """
        start = time.perf_counter()
        try:
            results = self.store.search(query, conversation_id, limit or self.top_k)
        except Exception as e:
            logger.exception("[%s] Search failed | conversation=%s", self.backend, conversation_id)
            raise VectorStoreError(f"{self.backend} search failed") from e

        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "[%s] Found %d results for conversation=%s in %.1fms",
            self.backend, len(results), conversation_id, latency_ms
        )
        return results, latency_ms

    def remember_turn(self, query: str, response: str, conversation_id: str) -> bool:
        """
        Write a user query and bot response back to memory.

        Returns:
            True if stored, False if the write was dropped
        """
        documents = [
            MemoryDocument(role="user", content=query),
            MemoryDocument(role="bot", content=response),
        ]
        try:
            self.upsert(documents, conversation_id)
            return True
        except VectorStoreError:
            with self._lock:
                self._failed_writes += 1
            logger.warning(
                "Dropped memory write for conversation=%s (%d dropped so far)",
                conversation_id, self._failed_writes
            )
            return False

    def forget(self, conversation_id: str) -> None:
        """Delete every record stored for a conversation."""
        try:
            self.store.delete_conversation(conversation_id)
        except Exception as e:
            logger.exception("[%s] Delete failed | conversation=%s", self.backend, conversation_id)
            raise VectorStoreError(f"{self.backend} delete failed") from e
        logger.info("[%s] Forgot conversation=%s", self.backend, conversation_id)
