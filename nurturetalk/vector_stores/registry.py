"""
Vector Store Registry

Central registry for all vector store backends. The active backend is
resolved once at startup from VECTOR_STORE.
"""

from typing import Dict, Type, Optional

from ..config import Settings
from ..core.embeddings import Embedder
from .base import VectorStore
from .pinecone_store import PineconeVectorStore
from .chroma_store import ChromaVectorStore
from .astra_store import AstraVectorStore
from .mem0_store import Mem0VectorStore
from .in_memory import InMemoryVectorStore


# Store registry
STORES: Dict[str, Type[VectorStore]] = {
    "pinecone": PineconeVectorStore,
    "chroma": ChromaVectorStore,
    "astra": AstraVectorStore,
    "mem0": Mem0VectorStore,
    "memory": InMemoryVectorStore,
}


def get_store(name: str, settings: Settings, embedder: Optional[Embedder] = None) -> VectorStore:
    """Get a store instance by name."""
    name = name.lower()
    if name not in STORES:
        raise ValueError(f"Unknown vector store: {name}. Available: {list(STORES.keys())}")

    if name == "pinecone":
        if settings.pinecone_integrated_embedding:
            embedder = None
        return PineconeVectorStore(settings, embedder=embedder)
    if name == "chroma":
        return ChromaVectorStore(settings, embedder=embedder)
    if name == "astra":
        if settings.astra_vectorize:
            embedder = None
        return AstraVectorStore(settings, embedder=embedder)
    if name == "mem0":
        return Mem0VectorStore(settings)
    return InMemoryVectorStore(embedder=embedder)


def list_stores() -> Dict[str, str]:
    """List all available stores with descriptions."""
    return {
        name: cls.description
        for name, cls in STORES.items()
    }


def needs_embedder(settings: Settings) -> bool:
    """Whether the selected store embeds client-side."""
    name = settings.vector_store.lower()
    if name == "pinecone":
        return not settings.pinecone_integrated_embedding
    if name == "astra":
        return not settings.astra_vectorize
    return name in ("chroma", "memory")
