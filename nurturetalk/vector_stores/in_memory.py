"""
In-Memory Store - Local Development Backend

Keeps records in per-conversation buckets inside the process and ranks them
by cosine similarity. Nothing survives a restart.
"""

import threading
from typing import List, Dict

from ..core.embeddings import Embedder, cosine_similarity
from ..models.memory import MemoryDocument, SearchResult
from .base import VectorStore, DEFAULT_TOP_K, record_id, record_metadata


class InMemoryVectorStore(VectorStore):
    """Process-local store scoped by conversation bucket."""

    name = "memory"
    description = "In-process store with cosine similarity (not persistent)"

    def __init__(self, embedder: Embedder):
        self.embedder = embedder
        self._buckets: Dict[str, List[Dict]] = {}
        self._lock = threading.Lock()

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        if not documents:
            return
        vectors = self.embedder.embed([d.as_text() for d in documents])
        records = [
            {
                "id": record_id(conversation_id, i),
                "vector": vector,
                "metadata": record_metadata(doc, conversation_id),
            }
            for i, (doc, vector) in enumerate(zip(documents, vectors))
        ]
        with self._lock:
            self._buckets.setdefault(conversation_id, []).extend(records)

    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        with self._lock:
            records = list(self._buckets.get(conversation_id, []))
        if not records:
            return []

        query_vector = self.embedder.embed_one(query)
        scored = [
            (cosine_similarity(query_vector, r["vector"]), r)
            for r in records
        ]
        scored.sort(key=lambda x: x[0], reverse=True)

        return [
            SearchResult(
                page_content=r["metadata"]["text"],
                score=score,
                role=r["metadata"]["role"],
                timestamp=r["metadata"]["timestamp"],
            )
            for score, r in scored[:top_k]
        ]

    def delete_conversation(self, conversation_id: str) -> None:
        with self._lock:
            self._buckets.pop(conversation_id, None)

    def count(self, conversation_id: str) -> int:
        with self._lock:
            return len(self._buckets.get(conversation_id, []))
