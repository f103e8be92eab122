"""
Mem0 Store - Mem0 over Pinecone

Uses Mem0's memory layer with Pinecone as vector store and OpenAI as
embedder. The conversation id is passed as Mem0's ``user_id``, which Mem0
turns into a metadata filter on every search.
"""

import logging
from typing import List, Dict, Any

from ..config import Settings
from ..models.memory import MemoryDocument, SearchResult
from .base import VectorStore, DEFAULT_TOP_K, utc_timestamp

logger = logging.getLogger(__name__)


# Mem0 follows OpenAI role names
_MEM0_ROLES = {"user": "user", "bot": "assistant"}


def mem0_config(settings: Settings) -> Dict[str, Any]:
    """Mem0 config for Pinecone + OpenAI."""
    return {
        "vector_store": {
            "provider": "pinecone",
            "config": {
                "api_key": settings.pinecone_api_key,
                "collection_name": settings.pinecone_index_name,
                "embedding_model_dims": settings.embedding_dims,
                "serverless_config": {
                    "cloud": settings.pinecone_cloud,
                    "region": settings.pinecone_region,
                }
            }
        },
        "embedder": {
            "provider": "openai",
            "config": {
                "model": settings.embedding_model,
                "api_key": settings.openai_api_key,
            }
        },
        "llm": {
            "provider": "openai",
            "config": {
                "model": settings.llm_model,
                "api_key": settings.openai_api_key,
            }
        }
    }


class Mem0VectorStore(VectorStore):
    """Mem0 memory keyed by conversation id."""

    name = "mem0"
    description = "Mem0 memory layer over Pinecone, user id per conversation"

    def __init__(self, settings: Settings, memory=None):
        if memory is None:
            from mem0 import Memory
            memory = Memory.from_config(mem0_config(settings))
        self.memory = memory

    def upsert(self, documents: List[MemoryDocument], conversation_id: str) -> None:
        if not documents:
            logger.info("No documents to upsert for conversation %s", conversation_id)
            return

        for doc in documents:
            # infer=False stores the turn verbatim instead of LLM-extracted facts
            self.memory.add(
                messages=[{"role": _MEM0_ROLES[doc.role], "content": doc.as_text()}],
                user_id=conversation_id,
                metadata={"role": doc.role, "timestamp": utc_timestamp()},
                infer=False,
            )
        logger.info("Added %d memories for conversation %s", len(documents), conversation_id)

    def search(
        self,
        query: str,
        conversation_id: str,
        top_k: int = DEFAULT_TOP_K
    ) -> List[SearchResult]:
        results = self.memory.search(
            query=query,
            user_id=conversation_id,
            limit=top_k
        )

        # Handle Mem0 response format {'results': [...]}
        if isinstance(results, dict):
            results = results.get("results", [])

        memories = []
        for r in (results or []):
            if isinstance(r, dict):
                metadata = r.get("metadata") or {}
                memories.append(SearchResult(
                    page_content=r.get("memory", r.get("content", "")),
                    score=r.get("score"),
                    role=metadata.get("role"),
                    timestamp=metadata.get("timestamp"),
                ))
        return memories

    def delete_conversation(self, conversation_id: str) -> None:
        self.memory.delete_all(user_id=conversation_id)
        logger.info("Deleted memories for conversation %s", conversation_id)
