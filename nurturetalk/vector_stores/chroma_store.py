"""
Chroma Store - Metadata Filter per Conversation

All conversations share one collection; every query carries a
``conversation_id`` filter. Uses a persistent local client unless
CHROMA_HOST points at a Chroma server.
"""

import logging
from typing import List, Optional

from ..config import Settings
from ..core.embeddings import Embedder
from ..models.memory import MemoryDocument, SearchResult
from .base import VectorStore, DEFAULT_TOP_K, record_id, record_metadata

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStore):
    """ChromaDB collection filtered by conversation id."""

    name = "chroma"
    description = "ChromaDB collection, metadata filter per conversation"

    def __init__(self, settings: Settings, embedder: Embedder, collection=None):
        self.embedder = embedder

        if collection is None:
            import chromadb
            if settings.chroma_host:
                client = chromadb.HttpClient(host=settings.chroma_host, port=settings.chroma_port)
            else:
                client = chromadb.PersistentClient(path=settings.chroma_path)
            collection = client.get_or_create_collection(
                name=settings.chroma_collection,
                metadata={"hnsw:space": "cosine"},
            )
        self.collection = collection

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        if not documents:
            logger.info("No documents to upsert for conversation %s", conversation_id)
            return

        texts = [d.as_text() for d in documents]
        self.collection.upsert(
            ids=[record_id(conversation_id, i) for i in range(len(documents))],
            documents=texts,
            embeddings=self.embedder.embed(texts),
            metadatas=[record_metadata(d, conversation_id) for d in documents],
        )
        logger.info("Upserted %d docs for conversation %s", len(documents), conversation_id)

    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        response = self.collection.query(
            query_embeddings=[self.embedder.embed_one(query)],
            n_results=top_k,
            where={"conversation_id": conversation_id},
            include=["documents", "metadatas", "distances"],
        )

        # Chroma returns one list per query embedding
        documents = (response.get("documents") or [[]])[0]
        metadatas = (response.get("metadatas") or [[]])[0]
        distances = (response.get("distances") or [[]])[0]

        results = []
        for i, text in enumerate(documents):
            metadata = metadatas[i] if i < len(metadatas) and metadatas[i] else {}
            distance: Optional[float] = distances[i] if i < len(distances) else None
            results.append(SearchResult(
                page_content=text or metadata.get("text", ""),
                score=None if distance is None else 1.0 - distance,
                role=metadata.get("role"),
                timestamp=metadata.get("timestamp"),
            ))
        return results

    def delete_conversation(self, conversation_id: str) -> None:
        self.collection.delete(where={"conversation_id": conversation_id})
        logger.info("Deleted records for conversation %s", conversation_id)
