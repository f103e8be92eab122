"""
Pinecone Store - Namespace per Conversation

Each conversation gets its own Pinecone namespace, so a query can only ever
match records written for the same conversation.

Two modes:
- Client-side embeddings: vectors come from the configured embedder and go
  through ``upsert``/``query``.
- Integrated embedding (PINECONE_INTEGRATED_EMBEDDING=true): the index
  embeds the text field itself; ``upsert_records``/``search`` are used.
"""

import logging
from typing import List, Optional

from ..config import Settings
from ..core.embeddings import Embedder
from ..models.memory import MemoryDocument, SearchResult
from .base import VectorStore, DEFAULT_TOP_K, record_id, record_metadata

logger = logging.getLogger(__name__)


class PineconeVectorStore(VectorStore):
    """Pinecone index with one namespace per conversation."""

    name = "pinecone"
    description = "Pinecone serverless index, namespace per conversation"

    def __init__(
        self,
        settings: Settings,
        embedder: Optional[Embedder] = None,
        index=None
    ):
        self.integrated = settings.pinecone_integrated_embedding
        self.text_field = settings.pinecone_text_field
        self.embedder = embedder

        if not self.integrated and embedder is None:
            raise ValueError("Pinecone without integrated embedding needs an embedder")

        if index is None:
            from pinecone import Pinecone
            client = Pinecone(api_key=settings.pinecone_api_key)
            if settings.pinecone_host:
                index = client.Index(name=settings.pinecone_index_name, host=settings.pinecone_host)
            else:
                index = client.Index(name=settings.pinecone_index_name)
        self.index = index

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        if not documents:
            logger.info("No documents to upsert for namespace '%s'", conversation_id)
            return

        if self.integrated:
            records = []
            for i, doc in enumerate(documents):
                metadata = record_metadata(doc, conversation_id)
                text = metadata.pop("text")
                records.append({"_id": record_id(conversation_id, i), self.text_field: text, **metadata})
            self.index.upsert_records(conversation_id, records)
        else:
            vectors = self.embedder.embed([d.as_text() for d in documents])
            self.index.upsert(
                vectors=[
                    {
                        "id": record_id(conversation_id, i),
                        "values": vector,
                        "metadata": record_metadata(doc, conversation_id),
                    }
                    for i, (doc, vector) in enumerate(zip(documents, vectors))
                ],
                namespace=conversation_id,
            )

        logger.info("Upserted %d docs to namespace '%s'", len(documents), conversation_id)

    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        if self.integrated:
            return self._search_integrated(query, conversation_id, top_k)

        response = self.index.query(
            vector=self.embedder.embed_one(query),
            top_k=top_k,
            include_metadata=True,
            namespace=conversation_id,
        )

        results = []
        for match in (response.matches or []):
            metadata = match.metadata or {}
            results.append(SearchResult(
                page_content=metadata.get("text", ""),
                score=match.score,
                role=metadata.get("role"),
                timestamp=metadata.get("timestamp"),
            ))
        return results

    def _search_integrated(self, query: str, conversation_id: str, top_k: int) -> List[SearchResult]:
        response = self.index.search(
            namespace=conversation_id,
            query={"inputs": {"text": query}, "top_k": top_k},
            fields=[self.text_field, "role", "timestamp"],
        )

        results = []
        for hit in response["result"]["hits"]:
            fields = hit["fields"] or {}
            results.append(SearchResult(
                page_content=fields.get(self.text_field, ""),
                score=hit["_score"],
                role=fields.get("role"),
                timestamp=fields.get("timestamp"),
            ))
        return results

    def delete_conversation(self, conversation_id: str) -> None:
        self.index.delete(delete_all=True, namespace=conversation_id)
        logger.info("Deleted namespace '%s'", conversation_id)
