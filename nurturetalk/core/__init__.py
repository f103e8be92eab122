from .embeddings import Embedder, OpenAIEmbedder, HashingEmbedder, get_embedder
from .memory_service import MemoryService
from .llm_orchestrator import LLMOrchestrator
from .rag_flow import RagChatFlow, ChatAnswer
from .chat_store import ChatStore
from .report import ReportGenerator

__all__ = [
    "Embedder", "OpenAIEmbedder", "HashingEmbedder", "get_embedder",
    "MemoryService", "LLMOrchestrator", "RagChatFlow", "ChatAnswer",
    "ChatStore", "ReportGenerator",
]
