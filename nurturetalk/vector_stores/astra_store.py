"""
AstraDB Store - Data API Collection

Records live in one vector collection and are filtered by
``conversation_id``. With ASTRA_VECTORIZE=true the collection computes
embeddings server-side from ``$vectorize``; otherwise vectors come from the
configured embedder.
"""

import logging
from typing import List, Dict, Optional

from ..config import Settings
from ..core.embeddings import Embedder
from ..models.memory import MemoryDocument, SearchResult
from .base import VectorStore, DEFAULT_TOP_K, record_id, record_metadata

logger = logging.getLogger(__name__)


class AstraVectorStore(VectorStore):
    """AstraDB collection filtered by conversation id."""

    name = "astra"
    description = "AstraDB Data API collection, filter per conversation"

    def __init__(
        self,
        settings: Settings,
        embedder: Optional[Embedder] = None,
        collection=None
    ):
        self.vectorize = settings.astra_vectorize
        self.embedder = embedder

        if not self.vectorize and embedder is None:
            raise ValueError("AstraDB without $vectorize needs an embedder")

        if collection is None:
            from astrapy import DataAPIClient
            client = DataAPIClient()
            database = client.get_database(
                settings.astra_db_api_endpoint,
                token=settings.astra_db_application_token,
            )
            collection = database.get_collection(settings.astra_db_collection)
        self.collection = collection

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        if not documents:
            logger.info("No documents to upsert for conversation %s", conversation_id)
            return

        if self.vectorize:
            vectors = [None] * len(documents)
        else:
            vectors = self.embedder.embed([d.as_text() for d in documents])

        rows: List[Dict] = []
        for i, (doc, vector) in enumerate(zip(documents, vectors)):
            row = {"_id": record_id(conversation_id, i), **record_metadata(doc, conversation_id)}
            if self.vectorize:
                row["$vectorize"] = row["text"]
            else:
                row["$vector"] = vector
            rows.append(row)

        self.collection.insert_many(rows)
        logger.info("Inserted %d docs for conversation %s", len(rows), conversation_id)

    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        if self.vectorize:
            sort = {"$vectorize": query}
        else:
            sort = {"$vector": self.embedder.embed_one(query)}

        cursor = self.collection.find(
            {"conversation_id": conversation_id},
            sort=sort,
            limit=top_k,
            include_similarity=True,
            projection={"text": True, "role": True, "timestamp": True},
        )

        return [
            SearchResult(
                page_content=doc.get("text", ""),
                score=doc.get("$similarity"),
                role=doc.get("role"),
                timestamp=doc.get("timestamp"),
            )
            for doc in cursor
        ]

    def delete_conversation(self, conversation_id: str) -> None:
        self.collection.delete_many({"conversation_id": conversation_id})
        logger.info("Deleted records for conversation %s", conversation_id)
