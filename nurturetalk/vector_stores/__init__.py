from .base import VectorStore, DEFAULT_TOP_K
from .pinecone_store import PineconeVectorStore
from .chroma_store import ChromaVectorStore
from .astra_store import AstraVectorStore
from .mem0_store import Mem0VectorStore
from .in_memory import InMemoryVectorStore
from .registry import (
    STORES,
    get_store,
    list_stores,
    needs_embedder,
)

__all__ = [
    # Base
    "VectorStore",
    "DEFAULT_TOP_K",

    # Backends
    "PineconeVectorStore",
    "ChromaVectorStore",
    "AstraVectorStore",
    "Mem0VectorStore",
    "InMemoryVectorStore",

    # Registry
    "STORES",
    "get_store",
    "list_stores",
    "needs_embedder",
]
